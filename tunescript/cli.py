"""tunescript CLI entry point."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, NoReturn, TextIO

import click

from tunescript import __version__
from tunescript.midi_exporter import MidiExporter
from tunescript.notation import PitchedNote, Score
from tunescript.notation_parser import parse
from tunescript.notation_serializer import stringify
from tunescript.playback import AudioRenderer
from tunescript.sheet_exporter import SUPPORTED_FORMATS, SheetExporter
from tunescript.sheet_models import THEMES

STDIN_NAME = "<stdin>"


def _read_score(notation_file: TextIO) -> Score:
    """Read notation text from an open file (or stdin) and parse it."""
    return parse(notation_file.read())


def _default_output(notation_file: TextIO, suffix: str) -> str:
    """Derive an output path from the input file name, e.g. song.txt → song.mid."""
    name = getattr(notation_file, "name", STDIN_NAME)
    if name in (STDIN_NAME, "-"):
        return f"output{suffix}"
    return str(Path(name).with_suffix(suffix))


def _default_title(notation_file: TextIO) -> str:
    name = getattr(notation_file, "name", STDIN_NAME)
    if name in (STDIN_NAME, "-"):
        return ""
    return Path(name).stem.replace("_", " ")


def score_to_dict(score: Score) -> dict[str, Any]:
    """JSON-ready view of a Score; durations are written as 'n/d' strings."""
    measures = []
    for measure in score.measures:
        notes = []
        for note in measure.notes:
            entry: dict[str, Any] = {
                "type": "note" if isinstance(note, PitchedNote) else "rest",
                "base_duration": str(note.base_duration),
                "duration": str(note.duration),
                "dotted": note.dotted,
            }
            if isinstance(note, PitchedNote):
                entry.update(
                    letter=note.letter,
                    octave=note.octave,
                    accidental=note.accidental,
                    tied=note.tied,
                )
            notes.append(entry)

        signature = measure.time_signature
        measures.append(
            {
                "time_signature": (
                    {"numerator": signature.numerator, "denominator": signature.denominator}
                    if signature
                    else None
                ),
                "notes": notes,
            }
        )
    return {"tempo": score.tempo, "key": score.key, "measures": measures}


def _fail(message: str) -> NoReturn:
    click.echo(f"  ERROR: {message}", err=True)
    sys.exit(1)


notation_argument = click.argument(
    "notation_file",
    type=click.File("r", encoding="utf-8"),
    default="-",
)


# ── CLI group ──────────────────────────────────────────────────────────────────

@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="tunescript")
@click.option("--verbose", "-v", is_flag=True, help="Log debug details (dropped tokens, export sizes).")
def main(verbose: bool) -> None:
    """tunescript: parse text music notation and export it as MIDI, audio or sheet music."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ── parse / format subcommands ─────────────────────────────────────────────────

@main.command("parse")
@notation_argument
@click.option("--indent", type=click.IntRange(0, 8), default=2, show_default=True, help="JSON indentation.")
def parse_command(notation_file: TextIO, indent: int) -> None:
    """
    Print the parsed score as JSON.

    NOTATION_FILE defaults to stdin.

    \b
    Examples:
      echo "4/4 C4q D4q E4q F4q" | tunescript parse
      tunescript parse melody.txt --indent 0
    """
    score = _read_score(notation_file)
    click.echo(json.dumps(score_to_dict(score), indent=indent or None, ensure_ascii=False))


@main.command("format")
@notation_argument
def format_command(notation_file: TextIO) -> None:
    """
    Print the notation in normalised form.

    Unparseable tokens disappear and legacy tokens (C4) are expanded (C4q).
    """
    click.echo(stringify(_read_score(notation_file)))


# ── midi subcommand ────────────────────────────────────────────────────────────

@main.command()
@notation_argument
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination MIDI file path. Defaults to the input name with .mid.",
)
def midi(notation_file: TextIO, output: str | None) -> None:
    """
    Export notation as a single-track MIDI file.

    \b
    Examples:
      tunescript midi melody.txt
      echo "tempo=90 C4q E4q G4h" | tunescript midi -o arpeggio.mid
    """
    score = _read_score(notation_file)
    resolved_output = output or _default_output(notation_file, ".mid")

    click.echo(f"tunescript v{__version__}")
    click.echo(f"  Measures : {len(score.measures)}  |  Tempo: {score.tempo} BPM")
    click.echo(f"  Output   : {resolved_output}")

    try:
        MidiExporter().export(score, resolved_output)
    except OSError as exc:
        _fail(f"Could not write MIDI file: {exc}")

    click.echo(f"Done!  Open '{resolved_output}' in any MIDI player.")


# ── sheet subcommand ───────────────────────────────────────────────────────────

@main.command()
@notation_argument
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination sheet file path. Defaults to extension based on --format.",
)
@click.option(
    "--title",
    default=None,
    metavar="TEXT",
    help="Title written into the output. Defaults to the input filename stem.",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(sorted(SUPPORTED_FORMATS), case_sensitive=False),
    default="svg",
    show_default=True,
    help="svg: staff drawing; png: the same drawing rasterised; html: engraved with verovio.",
)
@click.option(
    "--theme",
    type=click.Choice(sorted(THEMES)),
    default="light",
    show_default=True,
    help="Colour theme for svg/png output.",
)
def sheet(
    notation_file: TextIO,
    output: str | None,
    title: str | None,
    output_format: str,
    theme: str,
) -> None:
    """
    Render notation as sheet music (SVG, PNG or HTML).

    \b
    Examples:
      tunescript sheet melody.txt
      tunescript sheet melody.txt --format png --theme dark -o melody.png
      tunescript sheet melody.txt --format html --title "My Melody"
    """
    score = _read_score(notation_file)
    resolved_title = title if title is not None else _default_title(notation_file)

    exporter = SheetExporter(title=resolved_title, output_format=output_format, theme=theme)

    resolved_output = output or _default_output(notation_file, exporter.renderer.default_extension)

    click.echo(f"tunescript v{__version__}")
    click.echo(f"  Format : {exporter.output_format}")
    click.echo(f"  Title  : {resolved_title}")
    click.echo(f"  Output : {resolved_output}")

    try:
        exporter.export(score, resolved_output)
    except OSError as exc:
        _fail(f"Could not write output file: {exc}")
    except ValueError as exc:
        _fail(f"Could not render score: {exc}")

    click.echo(f"Done!  Wrote '{resolved_output}'.")


# ── audio subcommand ───────────────────────────────────────────────────────────

@main.command()
@notation_argument
@click.option(
    "--output",
    "-o",
    default=None,
    metavar="PATH",
    help="Destination WAV file path. Defaults to the input name with .wav.",
)
@click.option(
    "--volume",
    type=click.FloatRange(0.0, 1.0),
    default=AudioRenderer.DEFAULT_VOLUME,
    show_default=True,
    help="Peak gain of each tone.",
)
@click.option(
    "--sample-rate",
    type=click.IntRange(8000, 192000),
    default=AudioRenderer.SAMPLE_RATE,
    show_default=True,
    help="Output sample rate in Hz.",
)
def audio(notation_file: TextIO, output: str | None, volume: float, sample_rate: int) -> None:
    """
    Synthesise notation to a WAV file with sine tones.

    \b
    Examples:
      tunescript audio melody.txt
      tunescript audio melody.txt --volume 0.5 -o preview.wav
    """
    score = _read_score(notation_file)
    resolved_output = output or _default_output(notation_file, ".wav")
    renderer = AudioRenderer(sample_rate=sample_rate, volume=volume)

    click.echo(f"tunescript v{__version__}")
    click.echo(f"  Length : {renderer.total_duration(score):.2f} s  |  Tempo: {score.tempo} BPM")
    click.echo(f"  Output : {resolved_output}")

    try:
        renderer.export(score, resolved_output)
    except OSError as exc:
        _fail(f"Could not write WAV file: {exc}")

    click.echo(f"Done!  Wrote '{resolved_output}'.")
