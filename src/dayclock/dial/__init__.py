"""Day-dial interaction engine: time math, arc segments, drag and selection."""
