"""Terminal front end for jqlive."""
