import click
from functools import cached_property
from importlib import import_module, metadata

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


class UnsortedGroup(click.Group):
    def list_commands(self, ctx):
        return list(self.commands)


class LazyGroup(click.Group):
    """
    A click Group that imports the actual implementation only when
    needed.  This allows for more resilient CLIs where the top-level
    command does not fail when a subcommand is broken enough to fail
    at import time.
    """

    def __init__(self, import_name, **kwargs):
        self._import_name = import_name
        super().__init__(**kwargs)

    @cached_property
    def _impl(self):
        module, name = self._import_name.split(":", 1)
        return getattr(import_module(module), name)

    def get_command(self, ctx, cmd_name):
        return self._impl.get_command(ctx, cmd_name)

    def list_commands(self, ctx):
        return self._impl.list_commands(ctx)

    def invoke(self, ctx):
        return self._impl.invoke(ctx)

    def get_usage(self, ctx):
        return self._impl.get_usage(ctx)

    def get_params(self, ctx):
        return self._impl.get_params(ctx)


@click.group(cls=UnsortedGroup, context_settings=CONTEXT_SETTINGS)
@click.version_option(metadata.version(distribution_name="nanofai"))
def cli():
    """
    Read length and sequencing time statistics for nanopore FASTA indices.
    """


@cli.group(cls=LazyGroup, import_name="nanofai.cli.cli_index:cli")
def index():
    """
    Per-sample read length summaries and time/length correlation.
    """


__all__ = [
    "index_summarise",
    "index_correlate",
]
