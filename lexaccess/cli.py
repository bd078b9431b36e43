#!/usr/bin/env python3
"""
LexAccess CLI
=============
Command-line interface for the Semantic Access Test.

Usage:
    lexaccess play --age 30-44
    lexaccess match PETTLE PETAL -v
    lexaccess report results.json --age 18-29
    lexaccess history
    lexaccess stats
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console

from lexaccess import __version__

logger = logging.getLogger(__name__)


# =============================================================================
# Utilities
# =============================================================================

class Output:
    """Handles CLI output with quiet mode support."""

    def __init__(self, quiet: bool = False, console: Console = None):
        self.quiet = quiet
        self.console = console or Console(highlight=False)

    def print(self, *args, **kwargs):
        if not self.quiet:
            kwargs.setdefault('markup', False)
            self.console.print(*args, **kwargs)

    def render(self, renderable):
        if not self.quiet:
            self.console.print(renderable)

    def error(self, msg: str):
        print(f"Error: {msg}", file=sys.stderr)

    def success(self, msg: str):
        if not self.quiet:
            self.print(f"OK: {msg}")

    def json(self, data):
        """JSON goes to stdout even in quiet mode."""
        print(json.dumps(data, indent=2, ensure_ascii=False))

    def table(self, headers: list, rows: list, col_widths: list = None):
        """Print a formatted table."""
        if self.quiet:
            return

        if not col_widths:
            col_widths = [max(len(str(h)), max((len(str(r[i])) for r in rows), default=0)) + 2
                          for i, h in enumerate(headers)]

        header_line = ''.join(str(h).ljust(w) for h, w in zip(headers, col_widths))
        self.print(header_line)
        self.print('-' * len(header_line))

        for row in rows:
            self.print(''.join(str(c).ljust(w) for c, w in zip(row, col_widths)))


def validate_word(word: str) -> tuple[bool, str]:
    """Validate a guess/answer word: letters A-Z only."""
    if not word or not word.strip():
        return False, "Word cannot be empty"
    word = word.strip().upper()
    if not word.isascii() or not word.isalpha():
        return False, f"'{word}' must contain only letters A-Z"
    return True, word


def resolve_bracket(value: str) -> str:
    """Map user input to a configured age bracket; raises ValueError."""
    from lexaccess.report import AGE_NORMS

    label = (value or "").strip().replace("-", "–")
    if label not in AGE_NORMS:
        available = ', '.join(AGE_NORMS)
        raise ValueError(f"Unknown age bracket '{value}'. Available: {available}")
    return label


def load_results(path: str) -> list:
    """Read a JSON list of round results (or an object with a 'results' list)."""
    from lexaccess.models import RoundResult

    data = json.loads(Path(path).read_text(encoding='utf-8'))
    if isinstance(data, dict):
        data = data.get('results', [])
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of round results")
    return [RoundResult.from_dict(item) for item in data]


def _ask_bracket(out: Output, read) -> str:
    from lexaccess.report import AGE_NORMS

    labels = list(AGE_NORMS)
    out.print("What's your age group?")
    for i, label in enumerate(labels, 1):
        out.print(f"  {i}. {label}")
    while True:
        answer = read("> ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(labels):
            return labels[int(answer) - 1]
        try:
            return resolve_bracket(answer)
        except ValueError:
            out.print(f"Pick a number from 1 to {len(labels)}.")


def _play_rounds(session, ui, out: Output, read) -> None:
    """Interactive loop for the current phase (practice or test)."""
    from lexaccess.models import MatchOutcome
    from lexaccess.settings import get_setting

    reveal_cmd = get_setting("ui.reveal_command", "?")
    skip_cmd = get_setting("ui.skip_command", "!")
    phase = session.phase

    while session.phase is phase:
        ui.show_round(session)
        line = read(f"({reveal_cmd} reveal, {skip_cmd} skip) > ").strip().upper()
        if not line:
            continue
        if line == reveal_cmd:
            if not session.reveal_next():
                out.print("Every letter is already shown.")
            continue
        if line == skip_cmd:
            session.skip()
            continue

        state = session.current
        # Accept the whole word as well as just the hidden letters
        if len(line) == len(state.answer) and line.startswith(state.revealed_prefix):
            line = line[state.revealed:]

        outcome = session.submit(line)
        if outcome in (MatchOutcome.CORRECT, MatchOutcome.PARTIAL):
            ui.show_round(session)
            session.advance()


# =============================================================================
# Commands
# =============================================================================

def cmd_play(args, out: Output):
    """Run the interactive test."""
    from lexaccess.content import load_chain_file
    from lexaccess.session import QuizSession
    from lexaccess.ui import QuizUI

    read = out.console.input
    ui = QuizUI(console=out.console)

    bracket = resolve_bracket(args.age) if args.age else _ask_bracket(out, read)
    chain = load_chain_file(args.chain) if args.chain else None
    session = QuizSession(age_bracket=bracket, chain=chain)

    if not args.no_practice and session.practice_rounds:
        out.print(f"Try {session.practice_rounds} practice rounds first. They don't affect your score.")
        session.start_practice()
        _play_rounds(session, ui, out, read)
        out.print(f"Practice complete. The real test has {len(session.chain)} rounds.")

    session.start_test()
    _play_rounds(session, ui, out, read)

    report = session.report
    if args.json:
        out.json(report.to_dict())
    else:
        ui.show_report(report)

    if args.save:
        from lexaccess.db import get_db
        session_id = get_db().save(report)
        out.success(f"Saved session #{session_id}")

    return 0


def cmd_match(args, out: Output):
    """Classify a guess against an answer."""
    from lexaccess.phonetic_similarity import explain_match

    words = []
    for word in (args.guess, args.answer):
        valid, result = validate_word(word)
        if not valid:
            out.error(result)
            return 1
        words.append(result)
    guess, answer = words

    info = explain_match(guess, answer)
    if args.json:
        out.json(info)
        return 0

    out.print(f"{guess} vs {answer}: {info['outcome'].upper()}")
    if args.verbose:
        out.print("=" * 50)
        out.print(f"  Skeleton key:      {info['guess_key']:<12} {info['answer_key']}")
        out.print(f"  Cognate-folded:    {info['guess_normalized']:<12} {info['answer_normalized']}")
        out.print(f"  Consonants:        {info['guess_consonants']:<12} {info['answer_consonants']}")
        out.print(f"  Rhyme consonants:  {info['guess_rhyme']:<12} {info['answer_rhyme']}")
        out.print(f"  Vowels:            {info['guess_vowels']:<12} {info['answer_vowels']}")
        out.print(f"  Deciding step:     {info['step']}")
    return 0


def cmd_report(args, out: Output):
    """Build a report from a JSON file of round results."""
    from lexaccess.report import generate_report
    from lexaccess.ui import QuizUI

    bracket = resolve_bracket(args.age)
    results = load_results(args.file)
    report = generate_report(results, bracket)

    if args.json:
        out.json(report.to_dict())
    else:
        QuizUI(console=out.console).show_report(report, detailed=args.verbose)

    if args.save:
        from lexaccess.db import get_db
        session_id = get_db().save(report)
        out.success(f"Saved session #{session_id}")
    return 0


def cmd_norms(args, out: Output):
    """List age brackets and their norms."""
    from lexaccess.report import AGE_NORMS, DEFAULT_BRACKET

    rows = []
    for label, norm in AGE_NORMS.items():
        marker = '*' if label == DEFAULT_BRACKET else ''
        rows.append([label + marker, f"{norm.mean:g}", f"{norm.sd:g}"])
    out.table(['Ages', 'Mean', 'SD'], rows, [10, 8, 8])
    out.print("\n* default bracket")
    return 0


def cmd_history(args, out: Output):
    """List stored sessions."""
    from lexaccess.db import get_db

    records = get_db().recent(limit=args.limit)
    if args.json:
        out.json([r.to_dict() for r in records])
        return 0

    if not records:
        out.print("No sessions stored.")
        return 0

    rows = [
        [r.id, r.created_at, r.age_bracket, r.pct, r.percentile, r.archetype, r.weakest]
        for r in records
    ]
    out.table(['#', 'Date', 'Ages', 'Score', 'Pctl', 'Archetype', 'Weakest'], rows,
              [5, 21, 8, 7, 6, 18, 10])
    out.print(f"\nTotal: {len(records)}")
    return 0


def cmd_show(args, out: Output):
    """Show the full report of a stored session."""
    from lexaccess.db import get_db
    from lexaccess.ui import QuizUI

    record = get_db().get(args.id)
    if record is None:
        out.error(f"No session #{args.id}")
        return 1
    report = record.to_report()
    if args.json:
        out.json(report.to_dict())
    else:
        QuizUI(console=out.console).show_report(report)
    return 0


def cmd_stats(args, out: Output):
    """Show history statistics."""
    from lexaccess.db import get_db

    stats = get_db().stats()

    out.print("Session Statistics")
    out.print("=" * 50)
    out.print(f"\nTotal sessions: {stats['total']}")
    if not stats['total']:
        return 0

    out.print(f"Average score:      {stats['avg_pct']:.1f}")
    out.print(f"Average percentile: {stats['avg_percentile']:.1f}")
    out.print(f"Best score:         {stats['best_pct']}")

    out.print("\nBy Archetype:")
    for name, count in sorted(stats['by_archetype'].items(), key=lambda x: -x[1]):
        out.print(f"  {name:<16}: {count:>5}")

    out.print("\nWeakest Channel:")
    for channel, count in sorted(stats['by_weakest'].items(), key=lambda x: -x[1]):
        out.print(f"  {channel:<16}: {count:>5}")
    return 0


def cmd_export(args, out: Output):
    """Export session history to JSON."""
    from lexaccess.db import get_db

    json_str = get_db().export_json(args.output)
    if args.output:
        out.success(f"Exported to {args.output}")
    else:
        print(json_str)
    return 0


def cmd_reset(args, out: Output):
    """Delete all stored sessions."""
    from lexaccess.db import get_db

    db = get_db()
    if not args.force:
        answer = out.console.input(f"Delete all sessions in {db.db_path}? [y/N] ")
        if answer.strip().lower() not in ('y', 'yes'):
            out.print("Aborted.")
            return 1
    removed = db.reset()
    out.success(f"Removed {removed} sessions")
    return 0


# =============================================================================
# Main
# =============================================================================

def _configure_logging(level: str = None):
    from lexaccess.settings import get_setting

    level = (level or get_setting("logging.level", "WARNING")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=get_setting("logging.format", "%(levelname)s %(name)s: %(message)s"),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='lexaccess',
        description='LexAccess - Semantic Access Test',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s play --age 30-44
  %(prog)s play --no-practice --save
  %(prog)s match PETTLE PETAL -v
  %(prog)s report results.json --age 18-29 --json
  %(prog)s history --limit 10
  %(prog)s stats
"""
    )

    parser.add_argument('--version', '-V', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress non-essential output')
    parser.add_argument('--log-level', help='Logging level (DEBUG, INFO, WARNING, ...)')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # --- play ---
    p = subparsers.add_parser('play', aliases=['p'], help='Take the test interactively')
    p.add_argument('--age', '-a', help='Age bracket (e.g. 18-29); asked if omitted')
    p.add_argument('--no-practice', action='store_true', help='Skip the practice rounds')
    p.add_argument('--chain', help='YAML file with a custom word chain')
    p.add_argument('--save', '-s', action='store_true', help='Save the report to history')
    p.add_argument('--json', '-j', action='store_true', help='Print the report as JSON')

    # --- match ---
    p = subparsers.add_parser('match', aliases=['m'], help='Check whether a guess sounds like an answer')
    p.add_argument('guess', help='Typed guess')
    p.add_argument('answer', help='Target word')
    p.add_argument('--verbose', '-v', action='store_true', help='Show intermediate keys')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- report ---
    p = subparsers.add_parser('report', aliases=['r'], help='Build a report from a results file')
    p.add_argument('file', help='JSON file with a list of round results')
    p.add_argument('--age', '-a', default='18–29', help='Age bracket (default: 18-29)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')
    p.add_argument('--save', '-s', action='store_true', help='Save the report to history')
    p.add_argument('--verbose', '-v', action='store_true', help='Include strategies and round summary')

    # --- norms ---
    subparsers.add_parser('norms', help='List age brackets and norms')

    # --- history ---
    p = subparsers.add_parser('history', aliases=['ls'], help='List stored sessions')
    p.add_argument('--limit', type=int, default=20, help='Max results (default: 20)')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- show ---
    p = subparsers.add_parser('show', help='Show a stored report')
    p.add_argument('id', type=int, help='Session id')
    p.add_argument('--json', '-j', action='store_true', help='Output as JSON')

    # --- stats ---
    subparsers.add_parser('stats', help='Show history statistics')

    # --- export ---
    p = subparsers.add_parser('export', help='Export history to JSON')
    p.add_argument('--output', '-o', help='Output file path')

    # --- reset ---
    p = subparsers.add_parser('reset', help='Delete all stored sessions')
    p.add_argument('--force', '-f', action='store_true', help='Skip confirmation')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    _configure_logging(args.log_level)

    # Handle aliases
    cmd_map = {
        'p': 'play',
        'm': 'match',
        'r': 'report',
        'ls': 'history',
    }
    command = cmd_map.get(args.command, args.command)

    out = Output(quiet=getattr(args, 'quiet', False))

    commands = {
        'play': cmd_play,
        'match': cmd_match,
        'report': cmd_report,
        'norms': cmd_norms,
        'history': cmd_history,
        'show': cmd_show,
        'stats': cmd_stats,
        'export': cmd_export,
        'reset': cmd_reset,
    }

    handler = commands.get(command)
    if handler is None:
        parser.print_help()
        return 0

    try:
        return handler(args, out)
    except KeyboardInterrupt:
        out.print("\nCancelled.")
        return 130
    except EOFError:
        out.print("\nInput closed.")
        return 1
    except Exception as e:
        out.error(str(e))
        logger.debug("Command failed", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
