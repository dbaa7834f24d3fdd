import logging
from pathlib import Path

import click

from .actions import ActionKind
from .clients import resolve_client
from .config import ClientConfig, GeneratorConfig, ResourceDefinition, load_json
from .errors import GenerationError
from .generator import CodeWriter, TypeGenerator, describe
from .pipeline import build_actions
from .schema import load_schema


def _load_client_config(config):
    if config is None:
        return ClientConfig()
    return ClientConfig.from_dict(_read_json(config, "client configuration"))


def _read_json(path, what):
    try:
        return load_json(path)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Cannot load {what} from {path}: {e}") from e


def _read_schema(path):
    try:
        return load_schema(path)
    except (OSError, ValueError) as e:
        raise click.ClickException(f"Cannot load schema from {path}: {e}") from e


def _select_module(client, module, client_config):
    """Return (module name, configured schema path) for --client or --module."""
    if bool(client) == bool(module):
        raise click.UsageError("Specify exactly one of --client or --module")
    if module:
        return module, None
    spec_module = resolve_client(client, client_config)
    return spec_module, client_config.get(client).path or None


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command("gen-types")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True), help="Client configuration JSON file")
@click.option("--client", default=None, type=str, help="Configured client identifier")
@click.option("--module", "-m", default=None, type=str, help="Explicit client module path, e.g. myapp.baml_client")
@click.option("--generator-config", default=None, type=click.Path(exists=True, resolve_path=True), help="Generator options JSON file")
@click.option("--source-label", default=None, type=str, help="Provenance label written into generated files")
@click.option("--dry-run", is_flag=True, default=False, help="Show what would be generated without writing files")
@click.option("--output", "-o", default=".", type=click.Path(file_okay=False, resolve_path=True), help="Root directory of the generated package tree")
@click.argument("path", required=False, default=None, type=click.Path(exists=True, resolve_path=True))
def gen_types(config, client, module, generator_config, source_label, dry_run, output, path):
    """Generate Python types from the BAML schema at PATH."""
    try:
        client_config = _load_client_config(config)
        client_module, configured_path = _select_module(client, module, client_config)
        path = path or configured_path
        if path is None:
            raise click.UsageError("No schema path given and none configured for the client")

        gen_config = GeneratorConfig.from_dict(_read_json(generator_config, "generator options")) if generator_config else GeneratorConfig()
        if source_label is not None:
            gen_config.source_label = source_label

        result = TypeGenerator(gen_config).generate(_read_schema(path), client_module)
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    for warning in result.warnings:
        click.echo(f"warning: {warning}", err=True)

    if dry_run:
        click.echo(f"Would generate {len(result.modules)} types in {result.types_module}:")
        for generated in result.modules:
            click.echo(f"  {CodeWriter.module_to_path(generated.module_path, output)} ({generated.kind.value} {generated.class_name})")
        return

    writer = CodeWriter(validate=gen_config.validate_before_write)
    try:
        written = writer.write(result, output, package_init=gen_config.write_package_init)
    except GenerationError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Generated {len(written)} files in {Path(output)}")


@cli.command("actions")
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True), help="Client configuration JSON file")
@click.option("--client", default=None, type=str, help="Configured client identifier")
@click.option("--module", "-m", default=None, type=str, help="Explicit client module path")
@click.option("--function", "-f", "functions", multiple=True, help="Function to import (default: all)")
@click.option("--telemetry", is_flag=True, default=False)
@click.argument("path", default=None, type=click.Path(exists=True, resolve_path=True))
def actions(config, client, module, functions, telemetry, path):
    """List the actions synthesized from the functions of the schema at PATH."""
    schema = _read_schema(path)

    resource = ResourceDefinition(
        name=Path(path).stem,
        client=client,
        client_module=module,
        import_functions=tuple(functions) or tuple(schema.function_names),
        telemetry=telemetry,
    )
    try:
        context = build_actions(resource, _load_client_config(config), schema=schema)
    except GenerationError as e:
        raise click.ClickException(str(e)) from e

    for warning in context.warnings:
        click.echo(f"warning: {warning}", err=True)

    for action in context.actions:
        arguments = ", ".join(f"{a.name}: {describe(a.type)}" for a in action.arguments)
        returns = describe(action.returns)
        if action.kind == ActionKind.STREAM:
            returns = f"stream of {returns}"
        click.echo(f"{action.name}({arguments}) -> {returns}")
