"""PNG renderers for the chapter grid and rating chart."""
