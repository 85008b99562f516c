"""Command line surface for the spell interaction engine.

Usage examples:
    python -m spellsynergy synthesize --count 200 --seed 7 --output artifacts/examples.json
    python -m spellsynergy synthesize --count 200 --format csv --output artifacts/examples.csv
    python -m spellsynergy export --examples artifacts/examples.json --format csv --output artifacts/dataset.csv
    python -m spellsynergy train --examples artifacts/examples.json
    python -m spellsynergy predict --spells "Fireball,Shield" --class Wizard --int 16 --wis 14 --terrain dungeon
    python -m spellsynergy quality --examples artifacts/examples.json --output artifacts/quality.json
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Any, List, Sequence

from spellsynergy.application.mappers.dataset_export import (
    EXPORT_FORMATS,
    export_ml_dataset,
    to_ml_dataset,
    training_examples_to_csv,
)
from spellsynergy.application.mappers.interaction_mapper import (
    performance_to_payload,
    prediction_to_payload,
    quality_report_to_payload,
    training_example_from_payload,
    training_example_to_payload,
)
from spellsynergy.application.services.interaction_service import SpellInteractionService
from spellsynergy.application.services.training_synthesizer import DEFAULT_EXAMPLE_COUNT, TrainingExampleSynthesizer
from spellsynergy.bootstrap import create_interaction_service
from spellsynergy.domain.errors import SpellInteractionError
from spellsynergy.domain.models.character import Character
from spellsynergy.domain.models.environment import EnvironmentalContext
from spellsynergy.domain.models.training import TrainingExample
from spellsynergy.infrastructure.inmemory.inmemory_spell_repo import DEFAULT_CHARACTER_CLASSES


def _parse_csv_list(value: str) -> list[str]:
    parts = [item.strip() for item in str(value).split(",") if item.strip()]
    if not parts:
        raise ValueError("Expected at least one comma-separated value")
    return parts


def _default_count() -> int:
    return int(os.getenv("SPELLSYNERGY_SYNTH_COUNT", str(DEFAULT_EXAMPLE_COUNT)))


def _add_dataset_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--examples", default="", help="JSON file of training examples; synthesizes when omitted")
    parser.add_argument("--count", type=int, default=None, help="Number of synthetic examples")
    parser.add_argument("--seed", default="", help="Seed for reproducible synthetic data")
    parser.add_argument("--classes", default=",".join(DEFAULT_CHARACTER_CLASSES), help="Comma-separated character classes")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spellsynergy", description="Spell interaction scoring and training tools")
    subparsers = parser.add_subparsers(dest="command", required=True)

    synthesize = subparsers.add_parser("synthesize", help="Generate synthetic training examples")
    _add_dataset_options(synthesize)
    synthesize.add_argument("--output", default="", help="Write examples to this file")
    synthesize.add_argument("--format", choices=EXPORT_FORMATS, default="json", help="Output format for the examples")

    export = subparsers.add_parser("export", help="Export an encoded feature/label dataset for ML tooling")
    _add_dataset_options(export)
    export.add_argument("--output", default="", help="Write the encoded dataset to this file")
    export.add_argument("--format", choices=EXPORT_FORMATS, default="json")

    train = subparsers.add_parser("train", help="Train the weight model and print its performance report")
    _add_dataset_options(train)

    predict = subparsers.add_parser("predict", help="Score a spell combination")
    _add_dataset_options(predict)
    predict.add_argument("--spells", required=True, help="Comma-separated spell names (2-4)")
    predict.add_argument("--class", dest="class_name", default="Wizard")
    predict.add_argument("--level", type=int, default=1)
    predict.add_argument("--int", dest="intelligence", type=int, default=10)
    predict.add_argument("--wis", dest="wisdom", type=int, default=10)
    predict.add_argument("--terrain", default="urban")
    predict.add_argument("--difficulty", default="moderate")
    predict.add_argument("--skip-training", action="store_true", help="Predict without training first")

    quality = subparsers.add_parser("quality", help="Report on training dataset quality")
    _add_dataset_options(quality)
    quality.add_argument("--output", default="", help="Write the report artifact to this JSON path")

    return parser


def read_examples(path: str | Path) -> List[TrainingExample]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    rows = payload.get("examples", []) if isinstance(payload, dict) else payload
    if not isinstance(rows, list):
        raise ValueError(f"Expected a list of training examples in {path}")
    return [training_example_from_payload(row) for row in rows if isinstance(row, dict)]


def write_text_artifact(path: str | Path, content: str) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_suffix(target.suffix + ".tmp")
    tmp_path.write_text(content, encoding="utf-8")
    tmp_path.replace(target)
    return target


def write_json_artifact(path: str | Path, payload: Any) -> Path:
    return write_text_artifact(path, json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False))


def _load_dataset(service: SpellInteractionService, args: argparse.Namespace) -> List[TrainingExample]:
    if args.examples:
        return read_examples(args.examples)
    if args.seed:
        service.synthesizer = TrainingExampleSynthesizer.from_seed(args.seed, policy=service.synthesizer.policy)
    if service.spell_library is None:
        raise ValueError("No spell library configured for synthesis")
    count = args.count if args.count is not None else _default_count()
    return service.generate_synthetic_training_data(
        service.spell_library.list_spells(),
        _parse_csv_list(args.classes),
        count,
    )


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _emit(output: str, content: str, summary: str) -> None:
    if output:
        artifact = write_text_artifact(output, content)
        print(f"{summary}: {artifact}")
    else:
        print(content)


def _run(service: SpellInteractionService, args: argparse.Namespace) -> int:
    examples = _load_dataset(service, args)

    if args.command == "synthesize":
        if args.format == "csv":
            content = training_examples_to_csv(examples)
        else:
            content = json.dumps(
                {"examples": [training_example_to_payload(example) for example in examples]},
                indent=2,
                sort_keys=True,
                ensure_ascii=False,
            )
        _emit(args.output, content, f"Wrote {len(examples)} training examples")
        return 0

    if args.command == "export":
        _emit(args.output, export_ml_dataset(to_ml_dataset(examples), args.format), "Wrote encoded dataset")
        return 0

    if args.command == "train":
        service.train(examples)
        _print_json(performance_to_payload(service.evaluate_performance()))
        return 0

    if args.command == "predict":
        if not args.skip_training:
            service.train(examples)
        library = service.spell_library
        if library is None:
            raise ValueError("No spell library configured for spell lookup")
        spells = library.get_many(_parse_csv_list(args.spells))
        character = Character(
            class_name=args.class_name,
            level=args.level,
            intelligence=args.intelligence,
            wisdom=args.wisdom,
        )
        context = EnvironmentalContext(terrain=args.terrain, combat_difficulty=args.difficulty)
        _print_json(prediction_to_payload(service.predict(spells, character, context)))
        return 0

    report = quality_report_to_payload(service.dataset_report(examples))
    if args.output:
        artifact = write_json_artifact(args.output, report)
        print(f"Dataset quality report generated: {artifact}")
    _print_json(report)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=os.getenv("SPELLSYNERGY_LOG_LEVEL", "WARNING").upper())

    service = create_interaction_service()
    try:
        return _run(service, args)
    except SpellInteractionError as exc:
        print(f"Cannot compute prediction: {exc}")
        return 1
    except KeyError as exc:
        print(f"Cannot compute prediction: {exc.args[0] if exc.args else exc}")
        return 1
    except ValueError as exc:
        parser.error(str(exc))
        return 2
    except OSError as exc:
        parser.error(f"cannot access {exc.filename or 'file'}: {exc.strerror or exc}")
        return 2
