"""Tests for roster projection, grouping, sorting and totals."""

import random

import pytest

from mflx.models import FranchiseInfo, StandingsTeam
from mflx.roster import (
    build_franchise_rosters,
    classify_roster_status,
    compute_totals,
    group_and_sort,
    project,
    rank_standings,
)
from mflx.schemas import PlayerRecord

DIRECTORY = [
    PlayerRecord(id='0531', name='Example Player', position='RB', team='BUF'),
    PlayerRecord(id='0100', name='Josh Allen', position='QB', team='BUF', age=29),
    PlayerRecord(id='0200', name='Justin Jefferson', position='WR', team='MIN'),
    PlayerRecord(id='0201', name='amon-Ra St. Brown', position='WR', team='DET'),
    PlayerRecord(id='0202', name='Brandon Aiyuk', position='WR', team='SF'),
    PlayerRecord(id='0300', name='Travis Kelce', position='TE', team='KC'),
    PlayerRecord(id='0400', name='Justin Tucker', position='K', team='BAL'),
    PlayerRecord(id='0500', name='Bills, Buffalo', position='DEF', team='BUF'),
    PlayerRecord(id='0600', name='Zach Coach', position='Coach', team='BUF'),
]


class TestProject:
    """Tests for joining raw entries against the directory."""

    def test_directory_hit(self):
        """Test a found taxi player keeps directory fields."""
        [player] = project([{'id': '0531', 'status': 'TAXI_SQUAD'}], DIRECTORY)
        assert (player.id, player.name, player.position, player.team) == ('0531', 'Example Player', 'RB', 'BUF')
        assert player.roster_status == 'taxi'

    def test_directory_miss(self):
        """Test an unknown id gets the stand-in fields and stays active."""
        [player] = project([{'id': '9999'}], DIRECTORY)
        assert (player.name, player.position, player.team) == ('Unknown Player', 'UNK', 'FA')
        assert player.roster_status == 'active'
        assert player.id == '9999'

    @pytest.mark.parametrize('size', [0, 1, 7, 40])
    def test_completeness_with_empty_directory(self, size):
        """Test N entries always project to N players."""
        roster = [{'id': f'{i:04d}', 'status': 'ROSTER'} for i in range(size)]
        assert len(project(roster, [])) == size
        assert len(project(roster, DIRECTORY)) == size

    def test_duplicate_entries_preserved(self):
        """Test repeated ids are not collapsed."""
        assert len(project([{'id': '0100'}, {'id': '0100'}], DIRECTORY)) == 2

    def test_order_preserved(self):
        ids = ['0300', '9999', '0100', '0531']
        assert [p.id for p in project([{'id': i} for i in ids], DIRECTORY)] == ids

    def test_loose_fields_parsed(self):
        """Test salary, contract year and status parsing."""
        [a, b, c] = project([
            {'id': '0100', 'salary': '25.50', 'contractYear': '3', 'contractStatus': 'Veteran'},
            {'id': '0200', 'salary': '', 'contractYear': '', 'contractStatus': ''},
            {'id': '0300', 'salary': 'n/a'},
        ], DIRECTORY)
        assert (a.salary, a.contract_years, a.contract_status) == (25.5, 3, 'Veteran')
        assert (b.salary, b.contract_years, b.contract_status) == (None, None, None)
        assert c.salary is None

    def test_directory_extras_carried(self):
        [player] = project([{'id': '0100'}], DIRECTORY)
        assert player.age == 29

    def test_dict_directory(self):
        """Test plain dict directories work like PlayerRecords."""
        [player] = project([{'id': '7'}], [{'id': '7', 'name': 'Dict Guy', 'position': 'K', 'team': 'NE'}])
        assert player.name == 'Dict Guy'


class TestClassification:
    """Tests for roster status classification."""

    @pytest.mark.parametrize('status,expected', [
        ('TAXI_SQUAD', 'taxi'),
        ('INJURED_RESERVE', 'ir'),
        ('IR', 'ir'),
        ('ROSTER', 'active'),
        ('', 'active'),
        (None, 'active'),
        ('taxi_squad', 'active'),
    ])
    def test_tokens(self, status, expected):
        assert classify_roster_status(status) == expected


class TestGroupAndSort:
    """Tests for bucket grouping and display order."""

    def test_position_order_then_name(self):
        """Test QB, RB, WR, TE, K, DEF order with unknown positions last."""
        roster = [{'id': pid} for pid in ['0600', '0500', '0400', '0300', '0202', '0201', '0200', '0531', '0100', '9999']]
        buckets = group_and_sort(project(roster, DIRECTORY))
        assert [p.name for p in buckets.active] == [
            'Josh Allen',
            'Example Player',
            'amon-Ra St. Brown',
            'Brandon Aiyuk',
            'Justin Jefferson',
            'Travis Kelce',
            'Justin Tucker',
            'Bills, Buffalo',
            'Unknown Player',
            'Zach Coach',
        ]

    def test_bucket_exclusivity(self):
        """Test every player lands in exactly one bucket."""
        rng = random.Random(7)
        statuses = ['TAXI_SQUAD', 'INJURED_RESERVE', 'IR', 'ROSTER', None]
        roster = [{'id': p.id, 'status': rng.choice(statuses)} for p in DIRECTORY * 3]
        projected = project(roster, DIRECTORY)
        buckets = group_and_sort(projected)

        assert len(buckets.active) + len(buckets.ir) + len(buckets.taxi) == len(projected)
        assert all(p.roster_status == 'active' for p in buckets.active)
        assert all(p.roster_status == 'ir' for p in buckets.ir)
        assert all(p.roster_status == 'taxi' for p in buckets.taxi)
        assert sorted(map(id, buckets.all_players())) == sorted(map(id, projected))

    def test_all_players_order(self):
        buckets = group_and_sort(project([
            {'id': '0100', 'status': 'TAXI_SQUAD'},
            {'id': '0200', 'status': 'IR'},
            {'id': '0300'},
        ], DIRECTORY))
        assert [p.id for p in buckets.all_players()] == ['0300', '0200', '0100']


class TestComputeTotals:
    """Tests for active-bucket totals."""

    def test_only_active_counted(self):
        """Test IR and taxi salaries and contracts never reach the totals."""
        buckets = group_and_sort(project([
            {'id': '0100', 'salary': '10', 'contractYear': '2'},
            {'id': '0200', 'salary': '5.5', 'contractYear': '1'},
            {'id': '0531', 'status': 'TAXI_SQUAD', 'salary': '100', 'contractYear': '9'},
            {'id': '0300', 'status': 'IR', 'salary': '50', 'contractStatus': 'Rookie'},
        ], DIRECTORY))
        totals = compute_totals(buckets.active)
        assert totals.salary == pytest.approx(15.5)
        assert totals.contract_years == 3
        assert totals.has_salaries is True
        assert totals.has_contracts is True

    def test_non_active_ignored_when_passed(self):
        """Test totals exclude non-active players even if handed the full roster."""
        players = project([{'id': '0531', 'status': 'TAXI_SQUAD', 'salary': '100'}], DIRECTORY)
        totals = compute_totals(players)
        assert totals.salary == 0
        assert totals.has_salaries is False

    def test_redraft_league(self):
        """Test leagues without salaries or contracts report neither."""
        totals = compute_totals(project([{'id': '0100'}, {'id': '0200'}], DIRECTORY))
        assert totals.has_salaries is False
        assert totals.has_contracts is False
        assert totals.salary == 0
        assert totals.contract_years == 0

    def test_zero_salary_still_a_salary(self):
        """Test a parsed 0 salary marks the league as salaried."""
        totals = compute_totals(project([{'id': '0100', 'salary': '0'}], DIRECTORY))
        assert totals.has_salaries is True

    def test_contract_status_alone(self):
        totals = compute_totals(project([{'id': '0100', 'contractStatus': 'Franchise Tag'}], DIRECTORY))
        assert totals.has_contracts is True
        assert totals.contract_years == 0


class TestLeagueViews:
    """Tests for whole-league roster and standings views."""

    def test_build_franchise_rosters(self):
        """Test names join from league info and rosters sort by franchise name."""
        rosters = [
            {'id': '0002', 'players': [{'id': '0100', 'salary': '3'}, {'id': '0531', 'status': 'TAXI_SQUAD'}]},
            {'id': '0001', 'players': [{'id': '9999'}]},
            {'id': '0003', 'players': []},
        ]
        franchises = [
            FranchiseInfo(id='0001', name='Zebras', owner_name='Pat'),
            FranchiseInfo(id='0002', name='aardvarks', logo_url='https://example.com/a.png'),
        ]
        views = build_franchise_rosters(rosters, franchises, DIRECTORY)

        assert [v.franchise_name for v in views] == ['aardvarks', 'Team 0003', 'Zebras']
        aardvarks = views[0]
        assert aardvarks.owner_name == 'Unknown Owner'
        assert [p.id for p in aardvarks.players] == ['0100', '0531']
        assert aardvarks.totals.salary == 3
        assert views[2].players[0].name == 'Unknown Player'

    def test_rank_standings(self):
        teams = [
            StandingsTeam('0001', 'Team 0001', wins=3, points_for=500),
            StandingsTeam('0002', 'Team 0002', wins=5, points_for=400),
            StandingsTeam('0003', 'Team 0003', wins=3, points_for=600),
        ]
        ranked = rank_standings(teams, [FranchiseInfo(id='0003', name='Hawks')], current_franchise_id='0001')

        assert [(t.franchise_id, t.rank) for t in ranked] == [('0002', 1), ('0003', 2), ('0001', 3)]
        assert ranked[1].franchise_name == 'Hawks'
        assert ranked[2].is_current_user is True
        assert teams[0].rank == 0
