"""File I/O utilities for question banks, bundles and quiz files."""

import json
from typing import List, Dict, Any
from pathlib import Path


class FileIO:
    """Utilities for file input/output operations."""

    @staticmethod
    def read_json(file_path: str) -> Any:
        """Read a JSON document from file.

        Args:
            file_path: Path to JSON file.

        Returns:
            Parsed JSON value.

        Raises:
            FileNotFoundError: If file doesn't exist.
            json.JSONDecodeError: If file contains invalid JSON.
            IOError: If file cannot be read.
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"JSON file not found: {file_path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError:
            raise
        except Exception as e:
            raise IOError(f"Failed to read JSON file: {e}")

    @staticmethod
    def write_json(file_path: str, data: Any, indent: int = None) -> None:
        """Write a JSON document to file.

        Args:
            file_path: Output file path.
            data: JSON-serializable value.
            indent: Optional indentation; None writes compact JSON.

        Raises:
            IOError: If file cannot be written.
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(path, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=indent)
        except Exception as e:
            raise IOError(f"Failed to write JSON file: {e}")

    @staticmethod
    def write_jsonl(file_path: str, data: List[Dict[str, Any]],
                   metadata: Dict[str, Any] = None) -> None:
        """Write data to JSONL file with optional metadata.

        Args:
            file_path: Output file path.
            data: List of dictionaries to write.
            metadata: Optional metadata to include as first line.

        Raises:
            IOError: If file cannot be written.
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(path, 'w', encoding='utf-8') as f:
                # Write metadata as first line if provided
                if metadata:
                    f.write(json.dumps({"metadata": metadata}, ensure_ascii=False) + '\n')

                for item in data:
                    f.write(json.dumps(item, ensure_ascii=False) + '\n')
        except Exception as e:
            raise IOError(f"Failed to write JSONL file: {e}")

    @staticmethod
    def read_jsonl(file_path: str) -> tuple[Dict[str, Any], List[Dict[str, Any]]]:
        """Read data from JSONL file.

        Args:
            file_path: Input file path.

        Returns:
            Tuple of (metadata, data_list). Metadata is empty dict if not present.

        Raises:
            FileNotFoundError: If file doesn't exist.
            IOError: If file cannot be read.
            json.JSONDecodeError: If file contains invalid JSON.
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"JSONL file not found: {file_path}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                lines = [line for line in f.readlines() if line.strip()]

            if not lines:
                return {}, []

            # Check if first line is metadata
            first_line = json.loads(lines[0])
            if "metadata" in first_line:
                metadata = first_line["metadata"]
                data_lines = lines[1:]
            else:
                metadata = {}
                data_lines = lines

            data = [json.loads(line) for line in data_lines]

            return metadata, data
        except json.JSONDecodeError as e:
            raise json.JSONDecodeError(f"Invalid JSON in file: {e}", e.doc, e.pos)
        except Exception as e:
            raise IOError(f"Failed to read JSONL file: {e}")

    @staticmethod
    def list_json_files(dir_path: str, exclude: List[str] = None) -> List[Path]:
        """List JSON files in a directory, sorted by name.

        Args:
            dir_path: Directory to scan.
            exclude: File names to skip.

        Returns:
            Sorted list of paths.

        Raises:
            FileNotFoundError: If the directory doesn't exist.
        """
        path = Path(dir_path)

        if not path.is_dir():
            raise FileNotFoundError(f"Directory not found: {dir_path}")

        skipped = set(exclude or [])
        return sorted(
            p for p in path.glob("*.json")
            if p.is_file() and p.name not in skipped
        )

    @staticmethod
    def ensure_directory(dir_path: str) -> None:
        """Ensure directory exists, create if it doesn't.

        Args:
            dir_path: Directory path to ensure.
        """
        Path(dir_path).mkdir(parents=True, exist_ok=True)
