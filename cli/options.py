"""CLI for option strategy analytics over JSON payloads."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List

from core.config import get_settings, load_settings
from core.logging import configure_logging
from services.options.service import OptionsAnalytics


def _load_payload(path: Path | None) -> Dict[str, Any]:
    if path is None:
        return {}
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("payload must be a JSON object")
    return payload


def _payoff(service: OptionsAnalytics, payload: Dict[str, Any], _: argparse.Namespace) -> Any:
    return service.compute_payoff(payload["legs"], float(payload["spotPrice"])).to_dict()


def _max_pain(service: OptionsAnalytics, payload: Dict[str, Any], _: argparse.Namespace) -> Any:
    return service.compute_max_pain(
        payload.get("strikes", []), payload.get("callOI", {}), payload.get("putOI", {})
    ).to_dict()


def _scenario(service: OptionsAnalytics, payload: Dict[str, Any], _: argparse.Namespace) -> Any:
    results = service.scenario_simulation(
        payload["legs"], float(payload["spotPrice"]), payload.get("scenarios", [])
    )
    return [result.to_dict() for result in results]


def _iv_percentile(service: OptionsAnalytics, payload: Dict[str, Any], _: argparse.Namespace) -> Any:
    value = service.iv_percentile(
        float(payload["currentIV"]), [float(v) for v in payload.get("historicalIVs", [])]
    )
    return {"ivPercentile": value}


def _oi_analysis(service: OptionsAnalytics, payload: Dict[str, Any], _: argparse.Namespace) -> Any:
    rows = service.analyze_open_interest(
        payload.get("strikes", []),
        call_oi=payload.get("callOI", {}),
        put_oi=payload.get("putOI", {}),
        call_oi_change=payload.get("callOIChange", {}),
        put_oi_change=payload.get("putOIChange", {}),
        call_iv=payload.get("callIV", {}),
        put_iv=payload.get("putIV", {}),
    )
    return [row.to_dict() for row in rows]


def _templates(service: OptionsAnalytics, _: Dict[str, Any], args: argparse.Namespace) -> Any:
    if args.category:
        templates = service.get_templates_by_category(args.category)
    else:
        templates = service.get_templates()
    return [template.to_dict() for template in templates]


_COMMANDS: Dict[str, Callable[[OptionsAnalytics, Dict[str, Any], argparse.Namespace], Any]] = {
    "payoff": _payoff,
    "max-pain": _max_pain,
    "scenario": _scenario,
    "iv-percentile": _iv_percentile,
    "oi-analysis": _oi_analysis,
    "templates": _templates,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Option strategy analytics")
    parser.add_argument("--config", type=Path, default=None, help="YAML settings file")
    parser.add_argument("--log-level", default=None)
    sub = parser.add_subparsers(dest="command", required=True)
    for name in ("payoff", "max-pain", "scenario", "iv-percentile", "oi-analysis"):
        cmd = sub.add_parser(name)
        cmd.add_argument("--input", type=Path, required=True, help="JSON payload file")
    templates = sub.add_parser("templates")
    templates.add_argument("--category", default=None)
    return parser


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config) if args.config else get_settings()
    configure_logging(args.log_level or settings.log_level, stream=sys.stderr)

    service = OptionsAnalytics(settings)
    try:
        payload = _load_payload(getattr(args, "input", None))
        output = _COMMANDS[args.command](service, payload, args)
    except (KeyError, ValueError) as exc:
        print(json.dumps({"error": str(exc)}))
        return 1

    print(json.dumps(output, indent=2, default=float))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
