import functools

import click

from nanofai.api.errors import NanofaiError


def input_options(f):
    """Options for locating index files and loading settings"""

    options = [
        click.option(
            "-f",
            "--filtered-dir",
            help="Directory containing index files for filtered reads",
            type=click.Path(file_okay=False),
        ),
        click.option(
            "-u",
            "--unfiltered-dir",
            help="Directory containing index files for unfiltered reads",
            type=click.Path(file_okay=False),
        ),
        click.option(
            "-c",
            "--config",
            help="Yaml file with analysis settings. Command line options take precedence.",
            type=click.Path(exists=True, dir_okay=False),
        ),
        click.option(
            "--pattern",
            help="Glob used to find index files (default: *sample.datetime.fai)",
        ),
        click.option(
            "--time-format",
            help="Timestamp format passed to pandas (default: ISO8601)",
        ),
    ]

    for option in reversed(options):
        f = option(f)
    return f


def report_errors(f):
    """Converts nanofai errors into a one line message and non-zero exit"""

    @functools.wraps(f)
    def wrapped(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (NanofaiError, ValueError) as e:
            raise click.ClickException(str(e))

    return wrapped


@click.group()
def cli():
    """Read length summaries and time/length correlation for index files."""


@cli.command()
@input_options
@click.option(
    "-o",
    "--output",
    help="Output table (.tsv or .csv)",
    default="read_length_summary.tsv",
)
@click.option("--json", "output_json", help="Also write summaries as json")
@click.option(
    "--confidence-level",
    help="Confidence level for the interval on the mean (default: 0.95)",
    type=click.FLOAT,
)
@click.option(
    "--decimals",
    help="Decimal places for the output table (default: 3)",
    type=click.INT,
)
@click.option(
    "--strict/--no-strict",
    help="Fail if any sample has a single read",
    default=False,
)
@report_errors
def summarise(*args, **kwargs):
    """
    Summarises read lengths per sample and filter status.

    """

    from nanofai.cli.index_summarise import summarise

    summarise(*args, **kwargs)


@cli.command()
@input_options
@click.option(
    "-o",
    "--output",
    help="Output json file",
    default="time_length_correlation.json",
)
@click.option(
    "-r",
    "--response",
    help="Dependent variable of the linear model",
    type=click.Choice(["time", "length"]),
    default="time",
)
@click.option(
    "--alpha",
    help="Significance threshold for the slope (default: 0.05)",
    type=click.FLOAT,
)
@click.option(
    "--decimals",
    help="Decimal places for the printed table (default: 3)",
    type=click.INT,
)
@report_errors
def correlate(*args, **kwargs):
    """
    Fits sequencing time against read length over all samples.

    """

    from nanofai.cli.index_correlate import correlate

    correlate(*args, **kwargs)
