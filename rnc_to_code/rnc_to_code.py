import logging
from pathlib import Path

import click

from .analysis import analyze_schema
from .build import load_mappings, regenerate
from .cli_utils import reconstruct_command_line
from .codegen import load_schema
from .errors import ConfigError, RncError
from .pipeline.config import CodegenConfig, ExternalModule, FormatterConfig, OutputMode


def _module_options(command):
    command = click.option("--module", "-m", default="", help="Module whose mapping tiers apply (sml, wml, ...)")(command)
    command = click.option("--strip-prefix", default=None, help="Prefix removed from definition names, e.g. sml_")(command)
    command = click.option("--names", default=None, type=click.Path(dir_okay=False), help="Name mapping YAML file")(command)
    command = click.option("--features", default=None, type=click.Path(dir_okay=False), help="Feature mapping YAML file")(command)
    return command


def _external_modules(values):
    """Parse PREFIX=MODULE:MAPPING_MODULE entries, e.g. a_=ooxml.dml:dml."""
    result = {}
    for value in values:
        prefix, _, target = value.partition("=")
        module, _, mapping_module = target.partition(":")
        if not prefix or not module or not mapping_module:
            raise click.BadParameter(f"expected PREFIX=MODULE:MAPPING_MODULE, got {value!r}", param_hint="--external")
        result[prefix] = ExternalModule(module=module, mapping_module=mapping_module)
    return result


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def cli(verbose):
    """Compile OOXML RELAX NG Compact schemas into Python code."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@_module_options
@click.option("--enable-feature", "enabled_features", multiple=True, help="Generate fields gated by this feature; repeatable")
@click.option("--types-module", default=None, help="Module the split parsers and serializers import types from")
@click.option(
    "--external",
    multiple=True,
    help="Resolve undefined types with PREFIX from another generated module: PREFIX=MODULE:MAPPING_MODULE; repeatable",
)
@click.option("--split", is_flag=True, default=False, help="Write types.py, parsers.py and serializers.py into OUTPUT")
@click.option("--format", "format_code", is_flag=True, default=False, help="Format the output with black")
@click.option(
    "--mode",
    default=OutputMode.FORCE.value,
    type=click.Choice([mode.value for mode in OutputMode]),
    help="What to do when an output file exists",
)
@click.option("--if-requested", is_flag=True, default=False, help="Only regenerate when OOXML_REGENERATE is set")
@click.argument("schemas", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.argument("output", type=click.Path())
def generate(
    module,
    strip_prefix,
    names,
    features,
    enabled_features,
    types_module,
    external,
    split,
    format_code,
    mode,
    if_requested,
    schemas,
    output,
):
    """Generate types, parsers and serializers from SCHEMAS into OUTPUT."""
    if not if_requested:
        missing = [path for path in schemas if not Path(path).exists()]
        if missing:
            raise click.ClickException(f"Schema not found: {', '.join(missing)}")

    config = CodegenConfig(
        strip_prefix=strip_prefix,
        module_name=module,
        enabled_features=list(enabled_features) if enabled_features else None,
        types_module=types_module,
        external_modules=_external_modules(external),
        formatter=FormatterConfig(enabled=format_code),
    )
    config.generation_comment = f"{config.generation_comment}\nCommand: {reconstruct_command_line(generate)}"

    try:
        written = regenerate(
            schemas,
            output,
            config,
            names_path=names,
            features_path=features,
            split=split,
            mode=OutputMode(mode),
            force=not if_requested,
        )
    except (RncError, ConfigError, FileExistsError) as e:
        raise click.ClickException(str(e)) from e

    for path in written:
        click.echo(f"Wrote {path}")


@cli.command()
@_module_options
@click.option("--strict", is_flag=True, default=False, help="Exit with status 1 when anything is unmapped")
@click.argument("schemas", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def analyze(ctx, module, strip_prefix, names, features, strict, schemas):
    """Report types and fields of SCHEMAS missing from the mapping files."""
    try:
        schema = load_schema(schemas)
        name_mappings, feature_mappings = load_mappings(names, features)
    except (RncError, ConfigError) as e:
        raise click.ClickException(str(e)) from e

    report = analyze_schema(schema, module, name_mappings, feature_mappings, strip_prefix)
    click.echo(f"{module or 'schema'}:", err=True)
    report.print(module)
    if strict and report.has_unmapped():
        ctx.exit(1)


if __name__ == "__main__":
    cli()
