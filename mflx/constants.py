"""Constants and mappings for the MFL client."""

DEFAULT_API_HOST = 'api.myfantasyleague.com'
DEFAULT_USER_AGENT = 'MFLREWRITE'
DEFAULT_COOKIE_NAME = 'MFL_USER_ID'
DEFAULT_TIMEOUT = 10.0

# 24 hours, in seconds
SESSION_TTL = 24 * 60 * 60
CACHE_MAX_AGE = 24 * 60 * 60

# Display order for roster positions; anything else sorts after DEF
POSITION_ORDER = ['QB', 'RB', 'WR', 'TE', 'K', 'DEF']

# Raw MFL roster status tokens
TAXI_STATUS = 'TAXI_SQUAD'
IR_STATUSES = frozenset({'INJURED_RESERVE', 'IR'})

# Stand-in fields for roster ids missing from the player directory
UNKNOWN_PLAYER = {
    'name': 'Unknown Player',
    'position': 'UNK',
    'team': 'FA',
}

# Cache collection name -> file name
COLLECTION_FILES = {
    'players': 'players.json',
    'nfl-teams': 'nfl-teams.json',
    'nfl-schedule': 'nfl-schedule.json',
    'scoring-rules': 'scoring-rules.json',
}

# Files that must exist for the cache to be considered healthy
REQUIRED_COLLECTIONS = ['players', 'nfl-teams', 'nfl-schedule']

CACHE_VERSION = '1.0.0'

# Abbreviation -> (name, conference, division)
NFL_TEAMS = {
    'ARI': ('Arizona Cardinals', 'NFC', 'West'),
    'ATL': ('Atlanta Falcons', 'NFC', 'South'),
    'BAL': ('Baltimore Ravens', 'AFC', 'North'),
    'BUF': ('Buffalo Bills', 'AFC', 'East'),
    'CAR': ('Carolina Panthers', 'NFC', 'South'),
    'CHI': ('Chicago Bears', 'NFC', 'North'),
    'CIN': ('Cincinnati Bengals', 'AFC', 'North'),
    'CLE': ('Cleveland Browns', 'AFC', 'North'),
    'DAL': ('Dallas Cowboys', 'NFC', 'East'),
    'DEN': ('Denver Broncos', 'AFC', 'West'),
    'DET': ('Detroit Lions', 'NFC', 'North'),
    'GB': ('Green Bay Packers', 'NFC', 'North'),
    'HOU': ('Houston Texans', 'AFC', 'South'),
    'IND': ('Indianapolis Colts', 'AFC', 'South'),
    'JAC': ('Jacksonville Jaguars', 'AFC', 'South'),
    'KC': ('Kansas City Chiefs', 'AFC', 'West'),
    'LV': ('Las Vegas Raiders', 'AFC', 'West'),
    'LAC': ('Los Angeles Chargers', 'AFC', 'West'),
    'LAR': ('Los Angeles Rams', 'NFC', 'West'),
    'MIA': ('Miami Dolphins', 'AFC', 'East'),
    'MIN': ('Minnesota Vikings', 'NFC', 'North'),
    'NE': ('New England Patriots', 'AFC', 'East'),
    'NO': ('New Orleans Saints', 'NFC', 'South'),
    'NYG': ('New York Giants', 'NFC', 'East'),
    'NYJ': ('New York Jets', 'AFC', 'East'),
    'PHI': ('Philadelphia Eagles', 'NFC', 'East'),
    'PIT': ('Pittsburgh Steelers', 'AFC', 'North'),
    'SF': ('San Francisco 49ers', 'NFC', 'West'),
    'SEA': ('Seattle Seahawks', 'NFC', 'West'),
    'TB': ('Tampa Bay Buccaneers', 'NFC', 'South'),
    'TEN': ('Tennessee Titans', 'AFC', 'South'),
    'WAS': ('Washington Commanders', 'NFC', 'East'),
}
