"""Command-line interface for the tabular training pipeline."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
import yaml

from tabtrain.core.exceptions import TabTrainException
from tabtrain.core.utils import (
    ConfigManager,
    LoggerFactory,
    PathManager,
    PrepareConfig,
    SeedManager,
    TrainConfig,
)
from tabtrain.data.schema import guess_target_column
from tabtrain.pipeline.session import PipelineSession

logger = LoggerFactory.get_logger("tabtrain.cli")

DEFAULT_CONFIG = "default"


@click.group()
@click.option("--config-dir", type=click.Path(exists=True, file_okay=False),
              help="Configuration directory path")
@click.option("--artifacts-dir", type=click.Path(file_okay=False),
              help="Directory for saved runs")
@click.option("--debug", is_flag=True, help="Enable debug mode")
@click.pass_context
def cli(ctx: click.Context, config_dir: Optional[str], artifacts_dir: Optional[str], debug: bool):
    """Tabular training pipeline: schema inference, encoding and MLP training."""
    # paths live on the context so options never leak into later invocations
    path_manager = PathManager()
    if config_dir:
        path_manager.config_dir = Path(config_dir)
    if artifacts_dir:
        path_manager.artifacts_dir = Path(artifacts_dir)

    ctx.ensure_object(dict)
    ctx.obj["path_manager"] = path_manager
    ctx.obj["config_manager"] = ConfigManager(path_manager.config_dir)

    if debug:
        LoggerFactory.set_level(logging.DEBUG)
        logger.debug("Debug mode enabled")


def _defaults(ctx: click.Context, section: str) -> Dict[str, Any]:
    """Section of the default config, or nothing when the file is absent."""
    config_manager: ConfigManager = ctx.obj["config_manager"]
    try:
        config = config_manager.load_config(DEFAULT_CONFIG)
    except FileNotFoundError:
        logger.debug(f"No {DEFAULT_CONFIG} config in {config_manager.config_dir}")
        return {}
    return dict(config.get(section) or {})


def _merge(base: Dict[str, Any], **overrides: Any) -> Dict[str, Any]:
    merged = dict(base)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return merged


def _load(session: PipelineSession, csv_path: str):
    try:
        return session.load(csv_path)
    except (TabTrainException, OSError, ValueError) as e:
        raise click.ClickException(f"Could not load {csv_path}: {e}") from e


def prepare_options(func):
    """Options shared by ``prepare`` and ``train``."""
    options = [
        click.option("--target", help="Target column (guessed from column names by default)"),
        click.option("--task", type=click.Choice(["auto", "classification", "regression", "clf", "reg"]),
                     help="Task type"),
        click.option("--exclude", multiple=True, help="Column to leave out of the features (repeatable)"),
        click.option("--text-col", help="Free-text column encoded as bag-of-words"),
        click.option("--vocab", type=int, help="Vocabulary size"),
        click.option("--split", type=float, help="Train share (0.8 or 80)"),
        click.option("--class-weight", type=click.Choice(["off", "auto"]), help="Class weight mode"),
        click.option("--seed", type=int, help="Shuffle seed"),
        click.option("--fit-scope", type=click.Choice(["all", "train"]),
                     help="Rows used to fit encoders and vocabulary"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _prepare(ctx: click.Context, session: PipelineSession, target: Optional[str], task: Optional[str],
             exclude: Tuple[str, ...], text_col: Optional[str], vocab: Optional[int], split: Optional[float],
             class_weight: Optional[str], seed: Optional[int], fit_scope: Optional[str]):
    schema = session.schema
    target = target or guess_target_column(schema.names)
    if target is None:
        raise click.ClickException("No columns to choose a target from")

    values = _merge(
        _defaults(ctx, "prepare"),
        target_col=target,
        task=task,
        text_col=text_col,
        vocab_size=vocab,
        split_pct=split,
        class_weight_mode=class_weight,
        seed=seed,
        fit_scope=fit_scope,
    )
    if exclude:
        values["exclude_cols"] = list(exclude)

    try:
        config = PrepareConfig(**values)
        if config.seed is not None:
            SeedManager.set_seed(config.seed)
        dataset = session.prepare(config)
    except (TabTrainException, ValueError) as e:
        raise click.ClickException(str(e)) from e

    config_hash = ctx.obj["config_manager"].get_config_hash(config.to_dict())
    logger.info(f"Prepared with config {config_hash} (seed {SeedManager.get_seed()})")
    click.echo(f"Config hash: {config_hash}")
    return dataset, config


def _echo_dataset(dataset) -> None:
    task = "classification" if dataset.is_classification else "regression"
    click.echo(f"Task: {task}")
    click.echo(f"Train rows: {dataset.n_train} | Test rows: {dataset.n_test}")
    click.echo(f"Input dim: {dataset.input_dim} (tabular {dataset.tabular_dim}, "
               f"vocabulary {dataset.vocabulary.size if dataset.vocabulary else 0})")
    if dataset.is_classification:
        click.echo(f"Classes ({dataset.n_classes}): {dataset.label_map}")
        if dataset.class_weights is not None:
            click.echo(f"Class weights: {[round(w, 4) for w in dataset.class_weights]}")


def _save_run(ctx: click.Context, session: PipelineSession, prepare_config: PrepareConfig,
              train_config: TrainConfig) -> Path:
    """Model plus a run summary in a new timestamped directory under the artifacts dir."""
    path_manager: PathManager = ctx.obj["path_manager"]
    run_dir = path_manager.create_run_directory()
    session.trainer.save(run_dir / "model.joblib")

    run = {
        "config_hash": ctx.obj["config_manager"].get_config_hash(prepare_config.to_dict()),
        "seed": SeedManager.get_seed(),
        "prepare": prepare_config.model_dump(mode="json"),
        "train": train_config.model_dump(mode="json"),
        "summary": session.summary(),
    }
    with open(run_dir / "run.yaml", "w") as f:
        yaml.safe_dump(run, f, sort_keys=False)
    return run_dir


@cli.command()
@click.argument("csv_path")
def schema(csv_path: str):
    """Infer and print the column schema of a CSV file or URL."""
    session = PipelineSession()
    inferred = _load(session, csv_path)

    click.echo(f"Sampled rows: {inferred.sample_size}")
    width = max(len(name) for name in inferred.names)
    for column in inferred:
        click.echo(f"  {column.name:<{width}}  {column.kind.value:<11}  {column.unique_count}")
    counts = inferred.kind_counts()
    click.echo(" | ".join(f"{kind}: {count}" for kind, count in counts.items()))
    click.echo(f"Suggested target: {guess_target_column(inferred.names)}")


@cli.command()
@click.argument("csv_path")
@prepare_options
@click.pass_context
def prepare(ctx: click.Context, csv_path: str, target, task, exclude, text_col, vocab, split, class_weight,
            seed, fit_scope):
    """Encode a CSV into train/test matrices and print their shape."""
    session = PipelineSession()
    _load(session, csv_path)
    dataset, _ = _prepare(ctx, session, target, task, exclude, text_col, vocab, split, class_weight, seed,
                          fit_scope)
    _echo_dataset(dataset)


@cli.command()
@click.argument("csv_path")
@prepare_options
@click.option("--arch", help="Hidden layer sizes, e.g. 128-64")
@click.option("--drop", type=float, help="Dropout rate")
@click.option("--epochs", type=int, help="Training epochs")
@click.option("--batch", type=int, help="Mini-batch size")
@click.option("--lr", type=float, help="Learning rate")
@click.option("--top-k", type=int, help="Rows in the prediction table")
@click.option("--save", "save_path", type=click.Path(dir_okay=False), help="Save the trained model here")
@click.option("--save-run", is_flag=True, help="Save model and run summary in a timestamped artifacts directory")
@click.pass_context
def train(ctx: click.Context, csv_path: str, target, task, exclude, text_col, vocab, split, class_weight, seed,
          fit_scope, arch, drop, epochs, batch, lr, top_k, save_path, save_run):
    """Prepare a CSV, train an MLP on it and report test metrics."""
    session = PipelineSession()
    _load(session, csv_path)
    dataset, prepare_config = _prepare(ctx, session, target, task, exclude, text_col, vocab, split,
                                       class_weight, seed, fit_scope)
    _echo_dataset(dataset)

    values = _merge(_defaults(ctx, "train"), arch=arch, drop=drop, epochs=epochs, batch=batch, lr=lr, seed=seed)

    def on_epoch(epoch: int, logs: Dict[str, float]) -> None:
        metrics = " ".join(f"{k}={v:.4f}" for k, v in logs.items())
        click.echo(f"Epoch {epoch + 1}: {metrics}")

    try:
        train_config = TrainConfig(**values)
        session.build_model(train_config)
        session.train(on_epoch=on_epoch)
        metrics = session.evaluate()
        table = session.predictions(top_k)
    except (TabTrainException, ValueError) as e:
        raise click.ClickException(str(e)) from e

    click.echo("Test: " + " ".join(f"{k}={v:.4f}" for k, v in metrics.items()))
    for row in table:
        click.echo("  " + " | ".join(
            f"{k}={v:.4f}" if isinstance(v, float) else f"{k}={v}" for k, v in row.items()
        ))

    if save_path:
        session.trainer.save(save_path)
        click.echo(f"Model saved to {save_path}")
    if save_run:
        run_dir = _save_run(ctx, session, prepare_config, train_config)
        click.echo(f"Run saved to {run_dir}")


if __name__ == "__main__":
    cli()
