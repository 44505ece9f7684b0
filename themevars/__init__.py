"""Theme Variables Mapper: map CSS theme files onto light/dark variable aliases."""

__version__ = "0.3.0"
