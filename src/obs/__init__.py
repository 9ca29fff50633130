"""Observation utilities for wasm-udf."""
