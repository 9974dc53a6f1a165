from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import TaggerConfig, load_config
from .conllu import load_conllu, write_tagged
from .evaluation import make_evaluator
from .model_storage import load_model, save_lexica, save_model
from .train import collect_lexica, decode, evaluate, train_tagger

TASK_CHOICES = ("lexica", "train", "evaluate", "tag")


def _configure_logging(args: argparse.Namespace) -> None:
    if getattr(args, "debug", False):
        level = logging.DEBUG
    elif getattr(args, "verbose", False):
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="[flexilabel] %(levelname)s %(name)s: %(message)s")


def _load_task_config(args: argparse.Namespace) -> TaggerConfig:
    config = load_config(args.config) if getattr(args, "config", None) else TaggerConfig()
    overrides = {}
    if getattr(args, "label_column", None):
        overrides["label_column"] = args.label_column
    if getattr(args, "negative_label", None):
        overrides["negative_label"] = args.negative_label
    if getattr(args, "bootstrap_rounds", None) is not None:
        overrides["bootstrap_rounds"] = args.bootstrap_rounds
    if getattr(args, "cutoff", None) is not None:
        overrides["frequent_form_cutoff"] = args.cutoff
    if getattr(args, "threshold", None) is not None:
        overrides["ambiguity_threshold"] = args.threshold
    if getattr(args, "metric", None):
        overrides["metric"] = args.metric
    try:
        # replace() runs the TaggerConfig checks again
        return replace(config, **overrides)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}")


def _require_file(path: Optional[Path], option: str) -> Path:
    if path is None:
        raise SystemExit(f"{option} is required")
    if not path.exists():
        raise SystemExit(f"{option} path does not exist: {path}")
    return path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flexilabel",
        description="Incremental sequence labeling: lexica collection, training, evaluation and tagging",
    )
    parser.add_argument("--version", "-V", action="version", version=f"flexilabel {__version__}")

    # Common arguments inherited by every subcommand
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument("--debug", action="store_true", help="Enable verbose debug logging")
    parent_parser.add_argument("--verbose", action="store_true", help="Print high-level progress messages")

    subparsers = parser.add_subparsers(dest="task", required=False)

    # lexica ------------------------------------------------------------------
    lexica_parser = subparsers.add_parser(
        "lexica",
        help="Collect frequent forms and ambiguity classes from training data",
        parents=[parent_parser],
    )
    lexica_parser.add_argument("--train", type=Path, required=True, help="Training data (CoNLL-U)")
    lexica_parser.add_argument("--output", type=Path, required=True, help="Output lexica JSON file")
    lexica_parser.add_argument("--config", type=Path, default=None, help="Tagger configuration (JSON)")
    lexica_parser.add_argument("--label-column", default=None, help="Gold label column (upos, xpos, deprel, feats:KEY, misc:KEY)")
    lexica_parser.add_argument("--cutoff", type=int, default=None, help="Document-frequency cutoff for frequent forms")
    lexica_parser.add_argument("--threshold", type=float, default=None, help="Ambiguity class probability threshold")
    lexica_parser.add_argument("--negative-label", default=None, help="Gold label for tokens without one (e.g. O)")

    # train -------------------------------------------------------------------
    train_parser = subparsers.add_parser("train", help="Train a model from training data", parents=[parent_parser])
    train_parser.add_argument("--train", type=Path, required=True, help="Training data (CoNLL-U)")
    train_parser.add_argument("--dev", type=Path, default=None, help="Development data (CoNLL-U); enables bootstrapping")
    train_parser.add_argument("--output-dir", type=Path, required=True, help="Directory for the trained model")
    train_parser.add_argument("--config", type=Path, default=None, help="Tagger configuration (JSON)")
    train_parser.add_argument("--label-column", default=None, help="Gold label column")
    train_parser.add_argument("--negative-label", default=None, help="Gold label for tokens without one (e.g. O)")
    train_parser.add_argument("--bootstrap-rounds", type=int, default=None, help="Maximum bootstrap rounds")
    train_parser.add_argument("--metric", choices=["accuracy", "f1", "pred"], default=None, help="Development metric")

    # evaluate ----------------------------------------------------------------
    eval_parser = subparsers.add_parser("evaluate", help="Score a model against gold data", parents=[parent_parser])
    eval_parser.add_argument("--model-dir", type=Path, required=True, help="Trained model directory")
    eval_parser.add_argument("--input", type=Path, required=True, help="Gold data (CoNLL-U)")
    eval_parser.add_argument("--metric", choices=["accuracy", "f1", "pred"], default=None, help="Evaluation metric")

    # tag ---------------------------------------------------------------------
    tag_parser = subparsers.add_parser("tag", help="Tag unlabeled input", parents=[parent_parser])
    tag_parser.add_argument("--model-dir", type=Path, required=True, help="Trained model directory")
    tag_parser.add_argument("--input", type=Path, required=True, help="Input data (CoNLL-U)")
    tag_parser.add_argument("--output", type=Path, default=None, help="Output file (default: STDOUT)")

    return parser


def run_lexica(args: argparse.Namespace) -> int:
    config = _load_task_config(args)
    sentences = load_conllu(_require_file(args.train, "--train"), label_column=config.label_column)
    lexica = collect_lexica(sentences, config)
    save_lexica(lexica, args.output, metadata={"train_file": str(args.train), "label_column": config.label_column})
    print(
        f"[flexilabel] {len(lexica.frequent_forms)} frequent forms, "
        f"{len(lexica.ambiguity_classes)} ambiguity classes -> {args.output}"
    )
    return 0


def run_train(args: argparse.Namespace) -> int:
    config = _load_task_config(args)
    train_sentences = load_conllu(_require_file(args.train, "--train"), label_column=config.label_column)
    dev_sentences = None
    if args.dev:
        dev_sentences = load_conllu(_require_file(args.dev, "--dev"), label_column=config.label_column)
    if args.verbose:
        print(f"[flexilabel] training on {len(train_sentences)} sentences", file=sys.stderr)

    result = train_tagger(
        train_sentences,
        dev_sentences,
        config,
        progress=(lambda msg: print(f"[flexilabel] {msg}", file=sys.stderr)) if args.verbose else None,
    )
    save_model(
        args.output_dir,
        result.classifier,
        result.lexica,
        config,
        metadata={
            "train_file": str(args.train),
            "dev_file": str(args.dev) if args.dev else None,
            "bootstrap_rounds": result.bootstrap_rounds,
            "scores": result.scores,
        },
    )
    if result.best_score is not None:
        print(f"[flexilabel] best development score: {result.best_score * 100:.2f}")
    print(f"[flexilabel] model saved to {args.output_dir}")
    return 0


def run_evaluate(args: argparse.Namespace) -> int:
    classifier, lexica, config = load_model(args.model_dir)
    metric = args.metric or config.metric
    sentences = load_conllu(_require_file(args.input, "--input"), label_column=config.label_column)
    evaluator = evaluate(
        sentences, classifier, lexica, config, evaluator=make_evaluator(metric, config.negative_label)
    )
    print(evaluator.report())
    return 0


def run_tag(args: argparse.Namespace) -> int:
    classifier, lexica, config = load_model(args.model_dir)
    sentences = load_conllu(
        _require_file(args.input, "--input"), label_column=config.label_column, with_labels=False
    )
    states = decode(sentences, classifier, lexica, config)
    output = write_tagged(states)
    if args.output:
        args.output.write_text(output, encoding="utf-8")
    else:
        print(output, end="")
    return 0


def main(argv: List[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    else:
        argv = list(argv)

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.task:
        parser.error("No task specified. Use one of: " + ", ".join(TASK_CHOICES))

    _configure_logging(args)

    if args.task == "lexica":
        return run_lexica(args)
    if args.task == "train":
        return run_train(args)
    if args.task == "evaluate":
        return run_evaluate(args)
    if args.task == "tag":
        return run_tag(args)
    parser.error(f"Unknown task '{args.task}'")
    return 2


if __name__ == "__main__":
    sys.exit(main())
