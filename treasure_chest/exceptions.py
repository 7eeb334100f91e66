"""
Exceptions for the treasure_chest package.
"""

__all__ = ['InvalidConfigError']


class InvalidConfigError(TypeError):
    """Raised when a cache config is missing a required function, or when that attribute is not callable"""

    def __init__(self, config, attr: str, value=None):
        self.config = config
        self.attr = attr
        self.value = value

    def __str__(self) -> str:
        if self.value is None:
            return f'Invalid cache config={self.config!r} - missing required function {self.attr!r}'
        return (
            f'Invalid cache config={self.config!r} - expected {self.attr!r} to be callable,'
            f' but found type={self.value.__class__.__name__}'
        )
