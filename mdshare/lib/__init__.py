"""Shared configuration, logging, errors and text helpers."""
