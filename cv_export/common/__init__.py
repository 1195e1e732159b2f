"""Shared configuration, logging and error handling for CV export."""
