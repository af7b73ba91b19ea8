"""FOI portal domain: models, state machines and services"""
