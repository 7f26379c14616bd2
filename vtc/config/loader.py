import yaml
from pathlib import Path
from .models import AppConfig

def load_config(config_path: Path) -> AppConfig:
    """Loads YAML config and parses it into AppConfig Pydantic model."""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    # Flat legacy layout: extensions/output_tag at the root instead of under 'general'
    if "general" not in data:
        legacy_keys = {"extensions", "output_tag", "temp_suffix", "log_dir", "debug"}
        general = {k: data.pop(k) for k in list(data) if k in legacy_keys}
        if general:
            data["general"] = general

    config = AppConfig(**data)

    # Relative tool directories are relative to the config file, not the cwd
    bin_dir = config.platform.windows_bin_dir
    if bin_dir and not Path(bin_dir).is_absolute():
        config.platform.windows_bin_dir = str((config_path.parent / bin_dir).resolve())

    return config
