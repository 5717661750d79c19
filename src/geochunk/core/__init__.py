"""Shared configuration, error, logging and hashing primitives."""
