import os


class Config:
    MEMORY_DB = os.environ.get('MEMORY_DB') or os.path.join('data', 'memory.db')
    # Card source: 'pokeapi' (network) or 'static' (built-in roster)
    CARD_PROVIDER = os.environ.get('CARD_PROVIDER', 'pokeapi')
    POKEAPI_BASE_URL = os.environ.get('POKEAPI_BASE_URL', 'https://pokeapi.co/api/v2')
    POKEAPI_TIMEOUT_SEC = float(os.environ.get('POKEAPI_TIMEOUT_SEC', '5'))
    POKEAPI_MAX_OFFSET = int(os.environ.get('POKEAPI_MAX_OFFSET', '800'))
    # Loss feedback timeline (ms): error cue at 0, card cue at D1, commit at D1 + D2
    LOSS_CARD_CUE_DELAY_MS = int(os.environ.get('LOSS_CARD_CUE_DELAY_MS', '400'))
    LOSS_COMMIT_DELAY_MS = int(os.environ.get('LOSS_COMMIT_DELAY_MS', '600'))
    # How long last_result stays visible after a click (ms)
    SUCCESS_FEEDBACK_MS = int(os.environ.get('SUCCESS_FEEDBACK_MS', '700'))
    ERROR_FEEDBACK_MS = int(os.environ.get('ERROR_FEEDBACK_MS', '400'))
    SOUND_VOLUME = float(os.environ.get('SOUND_VOLUME', '0.4'))
