#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
===============================================================================
 File:        app_config.py
 Created:     2026-02-05
 Description: Application configuration loader.

              This module defines the dataclass-based configuration schema for
              the reader and the exporter, and provides utilities to:

              - Load YAML configuration files
              - Map parsed YAML dictionaries into strongly-typed dataclass
                structures
              - Prefer config.user.yaml over config.yaml when it exists

 Requirements:
     - Python 3.8+
     - PyYAML

 License:
     MIT License
===============================================================================
"""
import yaml
from dataclasses import dataclass, fields, field
from pathlib import Path
from typing import Dict, Optional, Type, TypeVar, Any


@dataclass
class ReaderExtensions:
    """Data file extensions, split on the data file number."""
    dat: str = "DAT"
    mwd: str = "MWD"
    # Numbers up to and including this value use the `dat` extension
    threshold: int = 255


@dataclass
class ReaderConfig:
    """Configuration for reading an index file and its data files."""
    # Index file used when none is given on the command line
    index: Optional[str] = None
    max_workers: Optional[int] = None
    case_insensitive: bool = True
    extensions: ReaderExtensions = field(default_factory=ReaderExtensions)


@dataclass
class ExportConfig:
    """Configuration for the CSV exporter."""
    output_dir: str = "data/export"
    float_format: Optional[str] = None
    date_format: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class AppConfig:
    """The root configuration for the entire application."""
    reader: ReaderConfig = field(default_factory=ReaderConfig)
    export: ExportConfig = field(default_factory=ExportConfig)


# --- Load functionality ---
T = TypeVar("T")


def load_config_data(config_class: Type[T], data: Dict[str, Any]) -> T:
    """
    Recursively map a dictionary (from YAML) into a dataclass structure.

    Unknown keys are ignored.
    """
    if not isinstance(data, dict):
        return config_class()

    field_definitions = {f.name: f.type for f in fields(config_class)}
    final_args: Dict[str, Any] = {}

    for name, value in data.items():
        if name not in field_definitions:
            continue

        field_type = field_definitions[name]

        # Nested dataclass
        if hasattr(field_type, "__dataclass_fields__"):
            final_args[name] = load_config_data(field_type, value)

        # Primitive field
        else:
            final_args[name] = value

    return config_class(**final_args)


def load_app_config(file_path: str = "config.yaml") -> AppConfig:
    """
    Load the application configuration from a YAML file into an AppConfig object.

    If the file is missing or cannot be parsed, a default AppConfig is
    returned.
    """
    try:
        with open(file_path, "r") as f:
            yaml_data = yaml.safe_load(f)
    except FileNotFoundError:
        return AppConfig()
    except yaml.YAMLError as e:
        print(f"Error parsing YAML file {file_path}: {e}")
        return AppConfig()

    return load_config_data(AppConfig, yaml_data)


def resolve_config_path(explicit: Optional[str] = None) -> str:
    """
    Pick the configuration file: explicit path, else config.user.yaml if it
    exists, else config.yaml.
    """
    if explicit:
        return explicit
    # User config overrides default
    if Path("config.user.yaml").exists():
        return "config.user.yaml"
    return "config.yaml"
