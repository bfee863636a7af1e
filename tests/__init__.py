"""
Test suite for the four-way intersection simulation

- Lanes, ranks and admission control
- Virtual clock ordering
- Spawning and initial seeding
- Round-robin controller and departures
- Engine runs, render surfaces and config loading
"""
