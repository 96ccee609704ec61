"""Teamboard - live results board for team-based outdoor quiz events.

This package polls an inconsistent, versioned quiz REST API and reconciles
its two dialects into team rankings, a task catalog and a photo gallery.
"""

__version__ = "0.1.0"
