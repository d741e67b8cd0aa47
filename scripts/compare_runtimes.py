"""Quick comparison of the profiles built for recorded runtimes.

This utility lets developers check how a rule change shifts the documents
for every runtime in ``runtimes.yaml`` without a TV at hand.

Examples
--------
Summarise every bundled runtime::

    python scripts/compare_runtimes.py

Restrict the comparison and read an alternative runtimes file::

    python scripts/compare_runtimes.py --runtimes lab.yaml \
        --name tizen-5.5-fhd --name chrome-desktop
"""

from __future__ import annotations

import argparse
import sys
from typing import Iterable

from devprofile.config import ProfileConfig
from devprofile.context import ProfileContext
from devprofile.document import NegotiationDocument
from devprofile.platform.adapters import adapter_for_report


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Compare negotiation profiles across runtimes")
    parser.add_argument("--runtimes", default=None, help="Runtimes YAML file to read.")
    parser.add_argument(
        "--name",
        action="append",
        default=[],
        help="Runtime name to include (repeatable); defaults to all.",
    )
    return parser.parse_args(list(argv) if argv is not None else None)


def summarise(name: str, document: NegotiationDocument) -> str:
    direct = ", ".join(
        f"{rule.container}[{rule.video_codec}]" if rule.video_codec else rule.container
        for rule in document.direct_play_profiles
    )
    codecs = []
    for rule in document.codec_profiles:
        bitrate = rule.condition_for("VideoBitrate")
        label = rule.codec or rule.type.value
        if bitrate is not None:
            label += f"<={bitrate.value}{'!' if bitrate.is_required else ''}"
        codecs.append(label)
    lines = [
        f"== {name}",
        f"  direct play : {direct or '-'}",
        f"  transcoding : {', '.join(rule.container for rule in document.transcoding_profiles) or '-'}",
        f"  codec rules : {', '.join(codecs)}",
        f"  stream cap  : {'yes' if document.container_profiles else 'no'}",
    ]
    return "\n".join(lines)


def main(argv: Iterable[str] | None = None) -> int:
    args = parse_args(argv)
    config = ProfileConfig(runtimes_path=args.runtimes)
    runtimes = config.runtimes()
    names = args.name or sorted(runtimes)

    missing = [name for name in names if name not in runtimes]
    if missing:
        print(f"Unknown runtimes: {', '.join(missing)}", file=sys.stderr)
        return 1

    for name in names:
        context = ProfileContext(adapter_for_report(runtimes[name]))
        print(summarise(name, context.build()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
