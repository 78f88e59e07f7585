# main.py
"""
Main entry point for the Lorenz ethereal network background.

This script orchestrates the effect's lifecycle:
1. Loads configuration from `config.json`.
2. Initializes the logging system.
3. Opens the drawing surface and pre-renders the sprites.
4. Creates the particles, the simulation context and the frame scheduler.
5. Drives the scheduler until the window is closed.
6. Handles clean shutdown.
"""
import logging
from utils import setup_logging, load_config
import numpy as np
import cProfile
import pstats
import io


def main():
    """
    The main function to run the effect.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        config = load_config('config.json')
    except Exception as e:
        print(f"FATAL: Could not load config.json. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Lorenz Background Starting ---")

    run_params = config['run_control']
    vis_params = config['visualization']

    from particle import create_particles
    from simulation import SimulationContext
    from scheduler import FrameScheduler, FrameState
    from visualization import Visualizer, SurfaceUnavailableError

    # --- On Ready ---
    # 1. The surface comes first; without it the loop never starts.
    try:
        visualizer = Visualizer(
            fullscreen=vis_params['fullscreen'],
            window_size=(vis_params['window_width'], vis_params['window_height'])
        )
    except SurfaceUnavailableError:
        logging.critical("No drawing surface available. The effect will not start.")
        return

    # 2. Particles, context and scheduler sized to the actual surface.
    width, height = visualizer.size
    particles = create_particles(run_params['seed'])
    context = SimulationContext(particles, width, height)
    try:
        scheduler = FrameScheduler(context, visualizer.canvas, visualizer.sprites)
    except ValueError:
        visualizer.close()
        return

    profiler = cProfile.Profile() if run_params['profile'] else None

    log_throttle = max(1, run_params['log_throttle_frames'])
    max_frames = run_params['max_frames']
    driver_fps = vis_params['driver_fps']

    if profiler:
        profiler.enable()
    running = True
    while running:
        # Every iteration is one animation callback, whether or not it renders.
        running = visualizer.poll_events(scheduler)
        if not running:
            break

        state = scheduler.tick(visualizer.now_ms())
        if state is FrameState.ACTIVE:
            frame = scheduler.frames_rendered
            if frame % log_throttle == 0:
                logging.info(f"Rendered frame {frame} (simulation time {context.time:.4f}).")
                logging.debug(
                    f"Frame {frame} | Mean opacity: {np.mean(context.opacities):.3f} | "
                    f"Connections: {scheduler.last_connection_count} | "
                    f"Particles drawn: {scheduler.last_particles_drawn} | "
                    f"Respawns so far: {context.respawn_count}"
                )
            if max_frames and frame >= max_frames:
                logging.info(f"Reached max_frames ({max_frames}). Stopping.")
                running = False

        visualizer.present(driver_fps)
    if profiler:
        profiler.disable()

    visualizer.close()
    logging.info(
        f"Render loop finished: {scheduler.frames_rendered} frames rendered, "
        f"{scheduler.ticks_skipped} ticks skipped."
    )

    if profiler:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Lorenz Background Shutting Down ---")


if __name__ == "__main__":
    main()
