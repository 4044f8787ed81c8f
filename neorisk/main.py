# neorisk/main.py
import json
import logging
import os
import traceback
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

from neorisk.cli import finish_cli, run_cli
from neorisk.config.preferences import JsonPreferenceStore, load_clock_settings, rate_persister
from neorisk.config.settings import (
    ASTEROID_EPHEMERIS_FILE,
    EARTH_EPHEMERIS_FILE,
    OUTPUT_DIR,
    data_path,
)
from neorisk.data.asteroid_metadata import load_asteroid_file, parse_asteroid
from neorisk.data.ephemeris_parser import load_ephemeris_file, parse
from neorisk.data.neo_fetcher import fetch_horizons_vectors, fetch_neo_lookup
from neorisk.errors import FetchError, InvalidParameterError
from neorisk.models.ephemeris import EphemerisSeries
from neorisk.physics.timeconv import unix_ms_to_datetime
from neorisk.simulation.runner import SimulationSession, run_playback
from neorisk.visualization.animation import animate_session
from neorisk.visualization.plots import plot_impact_summary, plot_orbits

# --- Setup logger ------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-7s  %(message)s",
    datefmt="%H:%M:%S"
)
log = logging.getLogger("main")


def save_json(obj: Any, name_prefix: str) -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    out_dir = Path(OUTPUT_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    filename = out_dir / f"{name_prefix}_{ts}.json"
    with open(filename, "w") as f:
        json.dump(obj, f, indent=2, default=lambda o: repr(o))
    return str(filename)


def load_asteroid(metadata_path: str, neo_id: Optional[str]):
    if neo_id:
        try:
            return parse_asteroid(fetch_neo_lookup(neo_id, fallback_path=metadata_path))
        except FetchError as e:
            log.warning("NeoWs lookup failed: %s", e)
            return None
    if not os.path.exists(metadata_path):
        log.warning("Asteroid metadata not found: %s", metadata_path)
        return None
    return load_asteroid_file(metadata_path)


def load_series(filename: str, name: str, horizons_command: Optional[str]) -> EphemerisSeries:
    """
    Local ephemeris file first; otherwise one year of daily Horizons vectors.
    An unavailable source yields an empty series (positions report as absent).
    """
    path = data_path(filename)
    if os.path.exists(path):
        return load_ephemeris_file(path, name=name)
    if not horizons_command:
        return EphemerisSeries(name=name)

    now = datetime.now(timezone.utc)
    try:
        text = fetch_horizons_vectors(
            horizons_command,
            now.strftime("%Y-%m-%d"),
            (now + timedelta(days=365)).strftime("%Y-%m-%d"),
        )
    except FetchError as e:
        log.warning("Ephemeris for %s unavailable: %s", name, e)
        return EphemerisSeries(name=name)
    return parse(text, name=name)


def main():
    try:
        store = JsonPreferenceStore()
        clock_settings = load_clock_settings(store)

        # 1) Inputs
        choices = run_cli(clock_settings.rate_multiplier)
        asteroid = load_asteroid(choices.metadata_path, choices.neo_id)

        earth = load_series(EARTH_EPHEMERIS_FILE, "earth", "399")
        ast_cmd = asteroid.designation if asteroid is not None else None
        ast_series = load_series(ASTEROID_EPHEMERIS_FILE, "asteroid", ast_cmd)

        session = SimulationSession(
            earth_series=earth,
            asteroid_series=ast_series,
            asteroid=asteroid,
            clock_settings=clock_settings,
            persist_rate=rate_persister(store),
        )
        if choices.rate != session.clock.rate_multiplier:
            session.clock.set_rate(choices.rate)

        choices = finish_cli(choices, asteroid, session.clock.range_start_ms, session.clock.range_end_ms)

        # 2) Impact estimate
        impact = None
        if asteroid is not None and asteroid.close_approaches:
            approach = asteroid.close_approaches[choices.approach_index]
            try:
                impact = session.estimate_impact(
                    approach,
                    diameter_m=choices.diameter_m,
                    velocity_kms=choices.velocity_kms,
                    density_kg_m3=choices.density_kg_m3,
                )
                print(f"\n💥 {impact.description}")
                plot_impact_summary(impact)
            except InvalidParameterError as e:
                log.error("Impact estimate rejected: %s", e)

            if session.jump_to_approach(approach):
                log.info("Jumped to close approach %s", approach.date_full)

        # 3) Orbits
        if earth:
            plot_orbits(
                earth,
                ast_series,
                elements=asteroid.elements if asteroid is not None else None,
                name=asteroid.name if asteroid is not None else "Asteroid",
            )

        # 4) Mode dispatch
        frames = []
        if choices.mode == "live":
            animate_session(session)
        elif choices.mode == "playback":
            if not session.is_loaded:
                log.warning("No Earth ephemeris loaded; playback skipped")
            else:
                frames = run_playback(session, real_seconds=120.0)
                log.info("Playback produced %d frames, final state %s",
                         len(frames), frames[-1].clock.state.value)

        snap = session.clock.snapshot()
        out = {
            "meta": {
                "mode": choices.mode,
                "rate_multiplier": snap.rate_multiplier,
                "timestamp_utc": datetime.now(timezone.utc).isoformat(),
            },
            "asteroid": asteroid.name if asteroid is not None else None,
            "clock": {
                "current_utc": unix_ms_to_datetime(snap.current_ms).isoformat(),
                "state": snap.state.value,
                "progress": snap.progress,
            },
            "frames": len(frames),
            "impact": impact.to_dict() if impact is not None else None,
        }
        out_file = save_json(out, "neorisk_run")
        log.info("Saved run results: %s", out_file)

    except KeyboardInterrupt:
        log.info("Interrupted by user")
    except Exception:
        log.error("Unhandled error:\n%s", traceback.format_exc())
        raise


if __name__ == "__main__":
    main()
