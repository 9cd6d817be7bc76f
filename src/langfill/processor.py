import json
import os

from .errors import LocaleFileMalformed, PersistenceFailure, SourceFileMalformed, SourceFileMissing


class LocaleProcessor:
    def __init__(self, source_data):
        self.source_data = source_data

    def get_missing_keys(self, target_data):
        """Returns the sparse tree of source entries missing or empty in target_data."""
        return self.detect_missing(self.source_data, target_data)

    @staticmethod
    def detect_missing(source, target=None):
        """
        Walks source depth-first and keeps every leaf whose counterpart in
        target is absent or falsy. Nested mappings are only kept when something
        below them is missing. Arrays are leaves here.
        """
        if not isinstance(target, dict):
            target = {}

        missing = {}
        for key, value in source.items():
            if isinstance(value, dict):
                nested = LocaleProcessor.detect_missing(value, target.get(key))
                if nested:
                    missing[key] = nested
            elif not target.get(key):
                missing[key] = value
        return missing

    @staticmethod
    def count_leaves(tree):
        if isinstance(tree, dict):
            return sum(LocaleProcessor.count_leaves(v) for v in tree.values())
        return 1

    @staticmethod
    def merge_trees(existing, translated):
        """
        Overlays translated onto existing, recursing into mappings present on
        both sides. Neither argument is modified.
        """
        merged = dict(existing)
        for key, value in translated.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = LocaleProcessor.merge_trees(current, value)
            else:
                merged[key] = value
        return merged

    @staticmethod
    def load_source(file_path):
        if not os.path.exists(file_path):
            raise SourceFileMissing(file_path)
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise SourceFileMalformed(file_path, e) from e
        if not isinstance(data, dict):
            raise SourceFileMalformed(file_path, "top level must be an object")
        return data

    @staticmethod
    def load_json(file_path):
        if os.path.exists(file_path):
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                raise LocaleFileMalformed(file_path, e) from e
            if not isinstance(data, dict):
                raise LocaleFileMalformed(file_path, "top level must be an object")
            return data
        return {}

    @staticmethod
    def save_json(file_path, data):
        try:
            directory = os.path.dirname(file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write("\n")
        except OSError as e:
            raise PersistenceFailure(file_path, e) from e
