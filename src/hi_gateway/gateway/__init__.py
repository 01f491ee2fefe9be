"""Gateway layer: dispatch, fault normalization, response envelopes and entry points."""
