"""Command line interface for testing configuration loading"""
from . import settings_conf, DEFAULTS
from pathlib import Path

SECRET_KEYS = {'secret_key'}

def main():
    """Display loaded configuration"""
    print("\nSettings Configuration:")
    print("-" * 50)
    for key, value in settings_conf.items():
        if key in SECRET_KEYS and value:
            value = '*' * 8
        print(f"{key}: {value}")

    # Save example configuration file
    example_path = Path("settings.conf.example")
    if not example_path.exists():
        with open(example_path, "w") as f:
            f.write("[DEFAULT]\n")
            for key, value in DEFAULTS.items():
                f.write(f"{key} = {value}\n")
        print(f"\nWrote {example_path}")

if __name__ == "__main__":
    main()
