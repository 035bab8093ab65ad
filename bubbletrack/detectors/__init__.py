"""Face detector adapters producing per-frame boxes."""
