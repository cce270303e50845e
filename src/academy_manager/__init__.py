"""Academy Manager package.

This package is organized by feature modules (teams, players, events,
attendance, ...) with a thin Flask controller layer and service/repository
layers underneath.
"""
