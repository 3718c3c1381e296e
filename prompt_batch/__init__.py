"""Send local JSON records to a stored OpenAI prompt in batches."""

__version__ = "0.3.0"
