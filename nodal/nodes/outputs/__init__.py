"""Display and chart nodes."""
