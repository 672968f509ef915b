"""Fingerprint orchestration: business context in, FingerprintAnalysis out."""
