class QsfuzzError(Exception):
    pass

class ConfigError(QsfuzzError):
    pass

class URLParseError(QsfuzzError, ValueError):
    """Raw input line could not be parsed as a URL."""
    pass

class QueryParseError(QsfuzzError):
    """Raw query string of an already accepted URL could not be parsed."""
    pass

class QueryDecodeError(QsfuzzError):
    pass

class PoolError(QsfuzzError):
    pass

class QueryEncodeError(QsfuzzError):
    pass
