"""CLI for parsing, canonicalizing and comparing URNs."""

import argparse
import json
import logging
import sys

from .errors import UrnParseError
from .urn import Urn, canonicalize, equivalent, format_urn, parse_urn, quote_nss, to_urn

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _print_error(e: UrnParseError) -> None:
    """Report the violated rule and point at the offending character."""
    print(f"✗ {e}")
    kind = e.kind.value
    component = getattr(e, "component", None)
    if component is not None:
        kind += f" ({component.value})"
    print(f"  Kind: {kind}")
    print(f"  {e.text}")
    print(f"  {' ' * e.position}^")


def _parse_or_exit(text: str, max_length: int) -> Urn:
    if len(text) > max_length:
        print(f"✗ URN is longer than {max_length} characters")
        sys.exit(1)
    try:
        return parse_urn(text)
    except UrnParseError as e:
        logger.debug("Rejected URN %r: %s", text, e)
        _print_error(e)
        sys.exit(1)


def show_urn(urn: Urn, as_json: bool = False) -> None:
    """Print the components of a parsed URN."""
    canonical = format_urn(canonicalize(urn))

    if as_json:
        print(json.dumps({
            "urn": format_urn(urn),
            "scheme": urn.scheme,
            "nid": urn.nid,
            "nss": urn.nss,
            "r_component": urn.r_component,
            "q_component": urn.q_component,
            "f_component": urn.f_component,
            "canonical": canonical,
            "is_canonical": urn.is_canonical,
        }, indent=2))
        return

    print(f"✓ {format_urn(urn)}")
    print(f"  Scheme: {urn.scheme}")
    print(f"  NID: {urn.nid}")
    print(f"  NSS: {urn.nss}")
    if urn.decoded_nss != urn.nss:
        print(f"  NSS (decoded): {urn.decoded_nss}")
    if urn.r_component is not None:
        print(f"  r-component: {urn.r_component}")
    if urn.q_component is not None:
        print(f"  q-component: {urn.q_component}")
    if urn.f_component is not None:
        print(f"  f-component: {urn.f_component}")
    print(f"  Canonical: {canonical}")
    if not urn.is_canonical:
        print("  Note: not in canonical form")


def check_urns(lines: list[str], max_length: int) -> int:
    """Validate one URN per line. Returns the number of invalid entries."""
    invalid = 0
    for line in lines:
        text = line.strip()
        if not text or text.startswith("#"):
            continue
        if len(text) > max_length:
            print(f"✗ {text[:64]}... (longer than {max_length} characters)")
            invalid += 1
            continue
        try:
            parse_urn(text)
        except UrnParseError as e:
            print(f"✗ {text} ({e.kind.value} at {e.position}): {e.reason}")
            invalid += 1
            continue
        print(f"✓ {text}")
    logger.info("Checked URNs: %d invalid", invalid)
    return invalid


def _read_lines(path: str) -> list[str]:
    if path == "-":
        return sys.stdin.read().splitlines()
    with open(path, encoding="utf-8") as f:
        return f.read().splitlines()


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="RFC 8141 URN toolkit",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  urnkit parse urn:example:a123,z456?+CCResolve:cc=uk#frag
  urnkit parse URN:ISBN:0451450523 --json
  urnkit canonical URN:EXAMPLE:a123%2cz456
  urnkit equivalent urn:example:a123 URN:Example:a123#frag
  urnkit check --file urns.txt
  urnkit build --nid example --nss "hello world" --quote
  urnkit serve
""",
    )
    parser.add_argument(
        "command", choices=["parse", "canonical", "equivalent", "check", "build", "serve"]
    )
    parser.add_argument("urns", nargs="*", metavar="URN", help="URN(s) to work on")
    parser.add_argument("--json", action="store_true", help="JSON output (for parse)")
    parser.add_argument("--file", help="File with one URN per line, '-' for stdin (for check)")
    # Build-specific options
    parser.add_argument("--nid", help="Namespace identifier (for build)")
    parser.add_argument("--nss", help="Namespace-specific string (for build)")
    parser.add_argument("--r", dest="r_component", help="r-component (for build)")
    parser.add_argument("--q", dest="q_component", help="q-component (for build)")
    parser.add_argument("--f", dest="f_component", help="f-component (for build)")
    parser.add_argument("--quote", action="store_true", help="Percent-encode the NSS (for build)")

    args = parser.parse_args(argv)

    # Load settings (reads .env file)
    from .config import get_settings
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    if args.command == "serve":
        from .main import main as serve_main
        serve_main()

    elif args.command == "parse":
        if len(args.urns) != 1:
            print("Error: parse takes exactly one URN")
            sys.exit(1)
        show_urn(_parse_or_exit(args.urns[0], settings.max_input_length), as_json=args.json)

    elif args.command == "canonical":
        if len(args.urns) != 1:
            print("Error: canonical takes exactly one URN")
            sys.exit(1)
        urn = _parse_or_exit(args.urns[0], settings.max_input_length)
        print(format_urn(canonicalize(urn)))

    elif args.command == "equivalent":
        if len(args.urns) != 2:
            print("Error: equivalent takes exactly two URNs")
            sys.exit(1)
        a = _parse_or_exit(args.urns[0], settings.max_input_length)
        b = _parse_or_exit(args.urns[1], settings.max_input_length)
        if not equivalent(a, b):
            print("✗ Not equivalent")
            sys.exit(1)
        print("✓ Equivalent")

    elif args.command == "check":
        if args.file:
            lines = _read_lines(args.file)
        elif args.urns:
            lines = args.urns
        else:
            lines = _read_lines("-")
        if check_urns(lines, settings.max_input_length):
            sys.exit(1)

    elif args.command == "build":
        if not args.nid or args.nss is None:
            print("Error: --nid and --nss required for build")
            sys.exit(1)
        nss = quote_nss(args.nss) if args.quote else args.nss
        try:
            print(to_urn(
                args.nid,
                nss,
                r_component=args.r_component,
                q_component=args.q_component,
                f_component=args.f_component,
            ))
        except UrnParseError as e:
            _print_error(e)
            sys.exit(1)


if __name__ == "__main__":
    main()
