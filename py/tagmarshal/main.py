"""Command line interface for inspecting and converting marshalled data."""

import importlib
import logging
import sys
from typing import BinaryIO

import click

from tagmarshal.config import apply_config, load_config
from tagmarshal.drivers import EncodingDriver
from tagmarshal.engine import marshal, unmarshal
from tagmarshal.errors import MarshalError
from tagmarshal.log import setup_logging
from tagmarshal.registry import ClassMetadata, metadata_for

logger = logging.getLogger(__name__)


def _load_class(ref: str) -> tuple[type, ClassMetadata]:
    """Import a marshalable class given as <module>:<ClassName>, with its metadata."""
    module_name, sep, class_name = ref.partition(":")
    if not sep or not module_name or not class_name:
        raise click.BadParameter(f"Expected <module>:<ClassName>, got '{ref}'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"Cannot import '{module_name}': {e}") from e

    cls = getattr(module, class_name, None)
    meta = metadata_for(cls) if isinstance(cls, type) else None
    if meta is None:
        raise click.BadParameter(f"'{ref}' is not a marshalable class")
    return cls, meta


def _encoding_driver(meta: ClassMetadata, view: str) -> type[EncodingDriver]:
    driver_cls = meta.namespace.lookup(view)
    if driver_cls is None or not issubclass(driver_cls, EncodingDriver):
        name = driver_cls.__name__ if driver_cls is not None else "no driver"
        raise click.ClickException(
            f"View '{view}' of {meta.cls.__qualname__} has {name}, which has no byte encoding"
        )
    return driver_cls


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to configuration YAML file",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v: DEBUG, -vv: TRACE)",
)
@click.pass_context
def main(ctx: click.Context, config: str | None, verbose: int) -> None:
    """Tag-directed marshalling tool.

    Example usage:

        # Show the views declared by a class
        tagmarshal views mypkg.models:Point

        # Re-encode a JSON blob under the msgpack view
        tagmarshal -c views.yaml convert mypkg.models:Point point.json \\
            --from-view full --to-view wire -o point.bin
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["strict"] = False
    ctx.obj["verbose"] = verbose

    if config:
        try:
            settings = load_config(config)
            apply_config(settings)
        except MarshalError as e:
            raise click.ClickException(str(e)) from e
        ctx.obj["strict"] = bool(settings.get("strict", False))


@main.command()
@click.argument("class_ref")
def views(class_ref: str) -> None:
    """List the views of CLASS_REF (<module>:<ClassName>) and their tags."""
    cls, meta = _load_class(class_ref)

    click.echo(f"{cls.__qualname__} (namespace: {meta.namespace.name})")
    for view, field_map in meta.view_map.items():
        driver_cls = meta.namespace.lookup(view)
        driver_name = driver_cls.__name__ if driver_cls is not None else "no driver"
        click.echo(f"  {view} [{driver_name}]")
        for field_name, tag in field_map.items():
            nested = meta.nested_type(field_name)
            suffix = ""
            if nested is not None and metadata_for(nested) is not None:
                suffix = f" ({nested.__qualname__})"
            click.echo(f"    {field_name} -> {tag!r}{suffix}")


@main.command()
@click.argument("class_ref")
@click.argument("input_file", type=click.File("rb"))
@click.option("--from-view", "-f", required=True, help="View the input is encoded in")
@click.option("--to-view", "-t", required=True, help="View to encode the output in")
@click.option(
    "--output",
    "-o",
    type=click.File("wb"),
    default="-",
    show_default=True,
    help="Output file",
)
@click.pass_context
def convert(
    ctx: click.Context,
    class_ref: str,
    input_file: BinaryIO,
    from_view: str,
    to_view: str,
    output: BinaryIO,
) -> None:
    """Decode INPUT_FILE as CLASS_REF under one view and re-encode it under another.

    Use '-' as INPUT_FILE to read from stdin.
    """
    strict = ctx.obj["strict"]
    cls, meta = _load_class(class_ref)
    source = _encoding_driver(meta, from_view)
    target = _encoding_driver(meta, to_view)

    try:
        blob = source.load(input_file.read())
        obj = unmarshal(cls, blob, from_view, strict=strict)
        logger.debug(f"Decoded {obj!r}")
        result = marshal(obj, to_view, strict=strict)
        data = target.dump(result)
    except MarshalError as e:
        logger.error(f"{e}", exc_info=ctx.obj["verbose"] > 0)
        sys.exit(1)

    output.write(data)
    logger.info(f"Converted {cls.__qualname__} from '{from_view}' to '{to_view}'")


if __name__ == "__main__":
    main()
