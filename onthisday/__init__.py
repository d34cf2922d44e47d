"""Browse Wikipedia's "on this day" events from the command line."""
