import argparse
import logging
import sys

from .config import GAMMA_MIN, RunConfig
from .errors import EnhanceError
from .pipeline import enhance_file

USAGE_ERROR = 1


class _Parser(argparse.ArgumentParser):
    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(USAGE_ERROR, f"{self.prog}: error: {message}\n")


def _non_negative(value: str) -> float:
    return max(0.0, float(value))


def _gamma(value: str) -> float:
    return max(GAMMA_MIN, float(value))


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(prog="face-enhancer", description="Restore and upscale the main face of a photo")
    p.add_argument("input", help="Input image path")
    p.add_argument("output", help="Output image path")
    p.add_argument("--sr", default="models/EDSR_x4.pb", help="Super-resolution model (.pb)")
    p.add_argument("--scale", type=int, default=4, help="Upscale factor, clamped to 2..8")
    p.add_argument("--proto", default="models/opencv_face_detector.prototxt",
                   help="Face detector prototxt")
    p.add_argument("--weights", default="models/opencv_face_detector.caffemodel",
                   help="Face detector caffemodel")
    p.add_argument("--cascade", default=None, help="Haar cascade xml used when the detector finds nothing")
    p.add_argument("--conf", type=float, default=0.5, help="Face detector confidence threshold")
    p.add_argument("--clip", type=_non_negative, default=None, help="CLAHE clip limit inside the region")
    p.add_argument("--gclip", type=_non_negative, default=None, help="CLAHE clip limit of the final pass")
    p.add_argument("--sharp", type=_non_negative, default=None, help="Sharpen amount inside the region")
    p.add_argument("--gsharp", type=_non_negative, default=None, help="Sharpen amount of the final pass")
    p.add_argument("--gamma", type=_gamma, default=None, help="Gamma, >= 0.1")
    p.add_argument("--no-face-only", dest="face_only", action="store_false",
                   help="Restore the whole frame even when a face is found")
    p.add_argument("--no-final", dest="final_pass", action="store_false", help="Skip the final pass")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return p


def config_from_args(args: argparse.Namespace) -> RunConfig:
    return RunConfig(
        input=args.input,
        output=args.output,
        sr_model=args.sr,
        proto=args.proto,
        weights=args.weights,
        cascade=args.cascade,
        scale=args.scale,
        confidence=min(1.0, max(0.0, args.conf)),
        face_only=args.face_only,
        final_pass=args.final_pass,
        clip=args.clip,
        gclip=args.gclip,
        sharp=args.sharp,
        gsharp=args.gsharp,
        gamma=args.gamma,
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    config = config_from_args(args)
    try:
        enhance_file(config)
    except EnhanceError as exc:
        print(exc, file=sys.stderr)
        return exc.exit_code
    print(f"Saved: {config.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
