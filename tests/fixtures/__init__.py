"""Shared test models and tree builders."""
