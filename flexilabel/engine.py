"""
Incremental tagging engine.

The engine consumes one sentence at a time. Depending on the mode it either
feeds the lexica builder or runs the tagging loop: shift the next node, give
the rule hook a chance to label it, otherwise extract a feature vector and let
the label decision policy pick the label, then run the morphology hook.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .classifier import Classifier, InstanceCollector
from .doc import Sentence
from .features import FeatureExtractor, FeatureVector
from .hooks import MorphHook, RuleHook, no_morphology, no_rules
from .lexicon import AmbiguityClassBuilder
from .modes import TaggerMode, parse_mode
from .state import SentenceState

logger = logging.getLogger(__name__)

DEFAULT_MARGIN_THRESHOLD = 1.0

# What later feature extraction sees of the labels decided in TRAIN mode
TRAIN_HISTORY_GOLD = "gold"
TRAIN_HISTORY_HIDDEN = "hidden"
TRAIN_HISTORY_CHOICES = (TRAIN_HISTORY_GOLD, TRAIN_HISTORY_HIDDEN)


class TaggingEngine:
    """Mode-aware tagging loop around a classifier."""

    def __init__(
        self,
        mode: TaggerMode | str,
        extractor: Optional[FeatureExtractor] = None,
        *,
        classifier: Optional[Classifier] = None,
        sink: Optional[InstanceCollector] = None,
        ambiguity_builder: Optional[AmbiguityClassBuilder] = None,
        evaluator: Optional[Any] = None,
        rule_hook: RuleHook = no_rules,
        morph_hook: MorphHook = no_morphology,
        margin_threshold: float = DEFAULT_MARGIN_THRESHOLD,
        train_history: str = TRAIN_HISTORY_GOLD,
        negative_label: Optional[str] = None,
    ) -> None:
        self.mode = parse_mode(mode)
        if train_history not in TRAIN_HISTORY_CHOICES:
            raise ValueError(
                f"Unknown train_history '{train_history}' (expected one of: {', '.join(TRAIN_HISTORY_CHOICES)})"
            )
        if self.mode is TaggerMode.LEXICA:
            if ambiguity_builder is None:
                raise ValueError("LEXICA mode requires an ambiguity class builder")
        elif extractor is None:
            raise ValueError(f"{self.mode.name} mode requires a feature extractor")
        if self.mode.uses_classifier and classifier is None:
            raise ValueError(f"{self.mode.name} mode requires a classifier")
        if self.mode.is_train_or_bootstrap and sink is None:
            raise ValueError(f"{self.mode.name} mode requires a training sink")

        self.extractor = extractor
        self.classifier = classifier
        self.sink = sink
        self.ambiguity_builder = ambiguity_builder
        self.evaluator = evaluator
        self.rule_hook = rule_hook or no_rules
        self.morph_hook = morph_hook or no_morphology
        self.margin_threshold = margin_threshold
        self.train_history = train_history
        # Gold label of tokens without one (e.g. non-predicates); None leaves them unlabeled
        self.negative_label = negative_label
        self.stats: Dict[str, int] = {
            "sentences": 0,
            "tokens": 0,
            "rule_labels": 0,
            "classifier_labels": 0,
            "second_labels": 0,
            "instances": 0,
        }

    # ------------------------------------------------------------------ entry point

    def process(self, sentence: Sentence) -> SentenceState:
        state = self.init_state(sentence)

        if self.mode is TaggerMode.LEXICA:
            self.add_lexica(state)
        else:
            instances = self.tag(state)
            if self.mode.is_train_or_bootstrap:
                self.sink.add_instances(instances)
                self.stats["instances"] += len(instances)

        if self.mode is TaggerMode.DEVELOP and self.evaluator is not None:
            self.evaluator.count(sentence, state.get_gold_labels(), state.get_labels())

        self.stats["sentences"] += 1
        self.stats["tokens"] += sentence.size - 1
        return state

    def init_state(self, sentence: Sentence) -> SentenceState:
        """Wrap a sentence in a fresh state; node labels are cleared so gold data cannot leak."""
        sentence.simplify_forms()
        gold = None
        if self.mode.uses_gold:
            gold = sentence.get_gold_labels()
            if gold is None:
                raise ValueError(f"Sentence {sentence.id or '<unnamed>'} has no gold labels ({self.mode.name} mode)")
            if self.negative_label is not None:
                gold = [gold[0]] + [self.negative_label if label is None else label for label in gold[1:]]
        sentence.clear_labels()
        return SentenceState(sentence, gold)

    # ------------------------------------------------------------------ lexica

    def add_lexica(self, state: SentenceState) -> None:
        while True:
            node = state.shift()
            if node is None:
                break
            self.ambiguity_builder.add(node, state.get_gold_label())

    # ------------------------------------------------------------------ tagging

    def tag(self, state: SentenceState) -> List[Tuple[str, FeatureVector]]:
        """Tag every node of the state; returns the training instances harvested on the way."""
        instances: List[Tuple[str, FeatureVector]] = []
        write_node = self.mode is not TaggerMode.TRAIN

        while True:
            node = state.shift()
            if node is None:
                break
            label = self.rule_hook(state)
            if label is not None:
                self.stats["rule_labels"] += 1
                state.assign_label(label, write_node=write_node)
            else:
                label = self.get_label(instances, state)
                visible = label
                if self.mode is TaggerMode.TRAIN and self.train_history == TRAIN_HISTORY_HIDDEN:
                    visible = None
                state.assign_label(visible, write_node=write_node)
            self.morph_hook(node, label)

        return instances

    def get_label(self, instances: List[Tuple[str, FeatureVector]], state: SentenceState) -> Optional[str]:
        vector = self.extractor.extract(state)

        if self.mode is TaggerMode.TRAIN:
            label = state.get_gold_label()
            if len(vector) > 0 and label is not None:
                instances.append((label, vector))
            return label

        label = self.get_auto_label(vector, state)
        if self.mode is TaggerMode.BOOTSTRAP:
            gold = state.get_gold_label()
            if len(vector) > 0 and gold is not None:
                instances.append((gold, vector))
        return label

    def get_auto_label(self, vector: FeatureVector, state: SentenceState) -> Optional[str]:
        """Top prediction; a near-tie keeps the runner-up as an alternate label."""
        first, second = self.classifier.predict_top_two(vector)
        self.stats["classifier_labels"] += 1
        if second.label is not None and first.score - second.score < self.margin_threshold:
            state.add_second_label(second.label)
            self.stats["second_labels"] += 1
        return first.label


def tag_sentences(engine: TaggingEngine, sentences: Iterable[Sentence]) -> List[SentenceState]:
    states = [engine.process(sentence) for sentence in sentences]
    logger.debug("%s pass done: %s", engine.mode.value, engine.stats)
    return states
