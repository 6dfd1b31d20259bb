"""fixloop: run tests, ask a model why they fail, and apply its fixes."""

__version__ = "0.1.0"
