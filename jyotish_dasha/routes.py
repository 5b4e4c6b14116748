from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from flask import Blueprint, request, jsonify, current_app
from pydantic import ValidationError

from .schemas import BirthRequest, DashaRequest, TimelineRequest, TransitionsRequest, YoginiRequest
from .astro.dasha import resolve
from .astro.errors import DomainError, OutOfRangeError
from .astro.nakshatra import locate
from .astro.sandhi import scan, upcoming_transitions
from .astro.systems import VIMSHOTTARI, balance_of_first, chain_label, chain_to_dicts, root_periods
from .astro.timeline import calculate_timeline
from .astro.utils import as_utc, iso_z, parse_iso, to_utc
from .astro.yogini import yogini_details, yogini_system
from .logging_utils import safe_str

bp = Blueprint("api", __name__)


def _error(code: str, message: str, details: dict, status: int):
    return jsonify({
        "error": {
            "code": code,
            "message": message,
            "details": details,
        }
    }), status


def _validation_error(e: ValidationError):
    current_app.logger.info(f"Request validation error: {e.error_count()} error(s)")
    return _error("VALIDATION_ERROR", str(e), {"field": "request", "value": "invalid"}, 400)


def _domain_error(e: DomainError):
    current_app.logger.info(f"Domain error {e.code}: {e}", extra={"extra_data": {"errorCode": e.code}})
    status = 400 if isinstance(e, OutOfRangeError) else 422
    return _error(e.code, str(e), {"error": str(e)}, status)


def _calculation_error(what: str, e: Exception):
    current_app.logger.error(f"{what} calculation error: {e}", exc_info=True)
    return _error("CALCULATION_ERROR", f"Failed to calculate {what}", {"error": str(e)}, 500)


def _log_request(name: str, payload: BirthRequest) -> None:
    current_app.logger.info(
        f"{name} request: {safe_str(payload.model_dump())}",
        extra={"extra_data": {"endpoint": name}},
    )


def _optional_instant(value: Optional[str]) -> Optional[datetime]:
    return as_utc(parse_iso(value)) if value else None


def _birth_and_moon(payload: BirthRequest) -> Tuple[datetime, float, str]:
    """Birth instant in UTC and the sidereal Moon longitude, computed if not supplied."""
    birth_utc = to_utc(
        payload.datetime,
        payload.tz,
        payload.utcOffsetMinutes,
        payload.latitude,
        payload.longitude,
    )
    if payload.moonLongitude is not None:
        return birth_utc, payload.moonLongitude, "PROVIDED"

    # Imported lazily so the engine endpoints work without ephemeris files
    from .astro.ephemeris import init_ephemeris, julian_day_utc, moon_sidereal_longitude

    ayanamsha = payload.ayanamsha or current_app.config["AYANAMSHA"]
    init_ephemeris(current_app.config["EPHE_PATH"], ayanamsha)
    return birth_utc, moon_sidereal_longitude(julian_day_utc(birth_utc)), ayanamsha


def _warning(chain) -> Optional[dict]:
    if chain.warning is None:
        return None
    return {
        "code": chain.warning.code,
        "message": str(chain.warning),
        "level": chain.warning.level,
    }


@bp.route("/dasha", methods=["POST"])
def dasha():
    try:
        payload = DashaRequest.model_validate_json(request.data)
    except ValidationError as e:
        return _validation_error(e)
    _log_request("dasha", payload)

    try:
        birth_utc, moon_longitude, ayanamsha = _birth_and_moon(payload)
        at = _optional_instant(payload.atDate) or datetime.now(timezone.utc)
        depth = payload.depth or current_app.config["DEFAULT_DEPTH"]
        lookahead_days = payload.sandhiDays if payload.sandhiDays is not None else current_app.config["SANDHI_LOOKAHEAD_DAYS"]

        position = locate(moon_longitude)
        roots = root_periods(VIMSHOTTARI, birth_utc, position)
        chain = resolve(roots, at, depth, VIMSHOTTARI.cycle)
        flags = scan(chain, timedelta(days=lookahead_days))

        result = {
            "metadata": {
                "system": VIMSHOTTARI.name,
                "ayanamsha": ayanamsha,
                "depth": depth,
                "datetimeUTC": iso_z(birth_utc),
                "atDate": iso_z(at),
                "moonLongitude": position.longitude,
                "sandhiDays": lookahead_days,
            },
            "nakshatra": position.to_dict(),
            "balanceYears": balance_of_first(roots),
            "chain": chain_to_dicts(VIMSHOTTARI, chain),
            "label": chain_label(chain),
            "sandhi": [f.to_dict() for f in flags],
            "warning": _warning(chain),
        }
        current_app.logger.info(
            f"Dasha calculation successful - depth {chain.depth}/{depth}",
            extra={"extra_data": {"endpoint": "dasha", "depth": chain.depth}},
        )
        return jsonify(result), 200

    except DomainError as e:
        return _domain_error(e)
    except Exception as e:
        return _calculation_error("dasha", e)


@bp.route("/dasha/timeline", methods=["POST"])
def dasha_timeline():
    try:
        payload = TimelineRequest.model_validate_json(request.data)
    except ValidationError as e:
        return _validation_error(e)
    _log_request("timeline", payload)

    try:
        birth_utc, moon_longitude, _ = _birth_and_moon(payload)
        timeline, metadata = calculate_timeline(
            VIMSHOTTARI,
            birth_utc,
            moon_longitude,
            depth=payload.depth,
            from_date=_optional_instant(payload.fromDate),
            to_date=_optional_instant(payload.toDate),
            at_date=_optional_instant(payload.atDate),
        )
        current_app.logger.info(f"Timeline calculation successful - {len(timeline)} periods")
        return jsonify({"timeline": timeline, "metadata": metadata}), 200

    except DomainError as e:
        return _domain_error(e)
    except ValueError as e:
        return _error("VALIDATION_ERROR", str(e), {"field": "request", "value": "invalid"}, 400)
    except Exception as e:
        return _calculation_error("timeline", e)


@bp.route("/dasha/transitions", methods=["POST"])
def dasha_transitions():
    try:
        payload = TransitionsRequest.model_validate_json(request.data)
    except ValidationError as e:
        return _validation_error(e)
    _log_request("transitions", payload)

    try:
        birth_utc, moon_longitude, _ = _birth_and_moon(payload)
        start = _optional_instant(payload.fromDate) or datetime.now(timezone.utc)
        roots = root_periods(VIMSHOTTARI, birth_utc, locate(moon_longitude))
        transitions = upcoming_transitions(
            roots,
            start,
            timedelta(days=payload.lookaheadDays),
            VIMSHOTTARI.cycle,
            levels=payload.levels,
        )
        return jsonify({
            "transitions": [t.to_dict() for t in transitions],
            "metadata": {
                "system": VIMSHOTTARI.name,
                "fromDate": iso_z(start),
                "lookaheadDays": payload.lookaheadDays,
                "levels": payload.levels,
            },
        }), 200

    except DomainError as e:
        return _domain_error(e)
    except Exception as e:
        return _calculation_error("transitions", e)


@bp.route("/yogini", methods=["POST"])
def yogini():
    try:
        payload = YoginiRequest.model_validate_json(request.data)
    except ValidationError as e:
        return _validation_error(e)
    _log_request("yogini", payload)

    try:
        system = yogini_system(payload.mapping or current_app.config["YOGINI_MAPPING"])
        birth_utc, moon_longitude, ayanamsha = _birth_and_moon(payload)
        at = _optional_instant(payload.atDate) or datetime.now(timezone.utc)
        lookahead_days = payload.sandhiDays if payload.sandhiDays is not None else current_app.config["SANDHI_LOOKAHEAD_DAYS"]

        position = locate(moon_longitude)
        roots = root_periods(system, birth_utc, position)
        chain = resolve(roots, at, payload.depth, system.cycle)

        periods = []
        for period in roots:
            entry = period.to_dict()
            entry.update(yogini_details(period.element))
            periods.append(entry)

        return jsonify({
            "metadata": {
                "system": system.name,
                "ayanamsha": ayanamsha,
                "depth": payload.depth,
                "datetimeUTC": iso_z(birth_utc),
                "atDate": iso_z(at),
            },
            "nakshatra": position.to_dict(),
            "startIndex": system.start_index(position),
            "periods": periods,
            "chain": chain_to_dicts(system, chain),
            "label": chain_label(chain),
            "sandhi": [f.to_dict() for f in scan(chain, timedelta(days=lookahead_days))],
            "warning": _warning(chain),
        }), 200

    except DomainError as e:
        return _domain_error(e)
    except Exception as e:
        return _calculation_error("yogini dasha", e)
