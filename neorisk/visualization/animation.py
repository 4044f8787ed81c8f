# neorisk/visualization/animation.py
import matplotlib.pyplot as plt
import numpy as np
from matplotlib.animation import FuncAnimation

from neorisk.config.settings import SCENE_UNITS_PER_AU, TICK_INTERVAL_MS
from neorisk.physics.interpolation import series_to_scene
from neorisk.physics.timeconv import unix_ms_to_datetime


def _xz(points):
    # top-down view of the Y-up scene: horizontal plane is (x, z)
    p = np.asarray(points, dtype=float).reshape(-1, 3)
    return p[:, 0], p[:, 2]


def animate_session(session, show=True):
    """
    Live orbit view driven by the session clock at the 30 Hz tick cadence.
    Each animation frame measures the real elapsed time and steps the session.
    """
    fig, ax = plt.subplots(figsize=(8, 8))
    name = session.asteroid.name if session.asteroid is not None else "Asteroid"
    ax.set_title(f"Orbit View: {name}")

    lim = 2.0 * SCENE_UNITS_PER_AU
    ax.set_xlim(-lim, lim)
    ax.set_ylim(-lim, lim)
    ax.set_aspect("equal")

    ax.plot([0.0], [0.0], "o", color="#FDB813", markersize=12, label="Sun")

    if session.earth_series:
        ex, ez = _xz(series_to_scene(session.earth_series))
        ax.plot(ex, ez, color="#4DA6FF", alpha=0.3)
    if session.asteroid_series:
        axs, azs = _xz(series_to_scene(session.asteroid_series))
        ax.plot(axs, azs, color="#999999", alpha=0.5)

    earth_plot, = ax.plot([], [], "o", color="#4DA6FF", label="Earth")
    ast_plot, = ax.plot([], [], "o", color="#999999", label=name)
    trail_plot, = ax.plot([], [], "-", color="#FF6B6B", alpha=0.6)
    date_text = ax.text(0.02, 0.97, "", transform=ax.transAxes, fontsize=9, va="top")
    progress_text = ax.text(0.02, 0.93, "", transform=ax.transAxes, fontsize=8, va="top")

    ax.legend(loc="upper right")
    session.clock.mark_real_time()

    def update(_):
        frame = session.step()

        if frame.earth_scene is not None:
            x, z = _xz(frame.earth_scene)
            earth_plot.set_data(x, z)
        if frame.asteroid_scene is not None:
            x, z = _xz(frame.asteroid_scene)
            ast_plot.set_data(x, z)
        if len(frame.trail) > 1:
            tx, tz = _xz(frame.trail)
            trail_plot.set_data(tx, tz)

        date_text.set_text(unix_ms_to_datetime(frame.clock.current_ms).strftime("%Y-%m-%d %H:%M UTC"))
        if frame.clock.progress is not None:
            progress_text.set_text(f"{frame.clock.progress * 100.0:.1f}%  [{frame.clock.state.value}]")

        return [earth_plot, ast_plot, trail_plot, date_text, progress_text]

    anim = FuncAnimation(
        fig,
        update,
        interval=TICK_INTERVAL_MS,
        blit=True,
        cache_frame_data=False,
    )

    if show:
        plt.show()
    return anim
