"""Wire-format and default constants.

TOKEN_SIGIL and TOKEN_ID_LENGTH define the token shape written into user
documents (``&abc123``). Changing either breaks scanning of existing vaults.
"""

TOKEN_SIGIL = "&"
TOKEN_ID_LENGTH = 6

# Alphanumeric, case-sensitive; shuffled order as used by the plugin's nanoid alphabet
ID_ALPHABET = "6ncT34ia5NdpCkxsbMHASheF2J9ryP8LtBguIv0lzqW7KDYVfjRmZGEQXow1UO"

DEFAULT_FLASHCARD_FOLDER = "~card-data"
RECORD_SUFFIX = ".json"
DOCUMENT_SUFFIX = ".md"

DEFAULT_TEXT = "Question here?\n{{c1::Answer}}"
DEFAULT_EXTRA = "Extra info here"
