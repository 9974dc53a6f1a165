"""
flexilabel: incremental sequence labeling with rules, a linear classifier and lexical statistics.

One tagging loop serves lexicon collection, training, bootstrapping, development and decoding.
"""

__version__ = "1.0.0"

from flexilabel.config import TaggerConfig
from flexilabel.doc import Node, Sentence
from flexilabel.engine import TaggingEngine
from flexilabel.modes import TaggerMode

__all__ = ['TaggerConfig', 'TaggingEngine', 'TaggerMode', 'Node', 'Sentence', '__version__']
