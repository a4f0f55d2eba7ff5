"""Core engine components: dates, scales, positions, ticks, zoom and windowing."""
