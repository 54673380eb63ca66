class ConfigError(RuntimeError):
    """Base class for anything that can fail a reload."""

class FetchError(ConfigError):
    pass

class ReadError(ConfigError):
    pass

class ParseError(ConfigError):
    pass

class RenderError(RuntimeError):
    pass
