"""
Statistics relay package for the VoltAssistant home-automation add-on.

Buffers energy, financial and optimization readings in memory, rolls them up
into hourly buckets and submits them to the Home Assistant long-term
statistics API. Also generates Lovelace dashboard and energy-dashboard
configuration for the VoltAssistant sensors.

CHANGELOG:
- 2026-10-12: Initial creation (STORY-101)

TODO:
- None
"""
