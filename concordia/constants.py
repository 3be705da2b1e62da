"""Keywords and type names of the Concordia schema language."""

KEYWORD_TYPE = 'type'
KEYWORD_OPTIONAL = 'optional'
KEYWORD_DOC = 'doc'
KEYWORD_SCHEMA = 'schema'
KEYWORD_NAME = 'name'
KEYWORD_REFERENCE = '$ref'

TYPE_BOOLEAN = 'boolean'
TYPE_NUMBER = 'number'
TYPE_STRING = 'string'
TYPE_OBJECT = 'object'
TYPE_ARRAY = 'array'

ALL_TYPES = (TYPE_BOOLEAN, TYPE_NUMBER, TYPE_STRING, TYPE_OBJECT, TYPE_ARRAY)
ROOT_TYPES = (TYPE_OBJECT, TYPE_ARRAY)

CORE_KEYWORDS = {
    KEYWORD_TYPE,
    KEYWORD_OPTIONAL,
    KEYWORD_DOC,
    KEYWORD_SCHEMA,
    KEYWORD_NAME,
    KEYWORD_REFERENCE,
}

# Default timeout (seconds) for fetching referenced schemas over HTTP
DEFAULT_FETCH_TIMEOUT = 30
