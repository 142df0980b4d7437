"""
Allow running the package with: python -m burstcull

Examples:
    python -m burstcull import /path/to/shoot  # CLI commands
    python -m burstcull group --threshold 12
    python -m burstcull serve --port 5000      # Launch the HTTP API
    python -m burstcull config --init          # Create example config file
"""

import sys


def _show_config():
    from .user_config import get_user_config

    config = get_user_config()

    if '--init' in sys.argv or '-i' in sys.argv:
        if config.create_example_config():
            print("Created example configuration file at:")
            print(f"  {config.config_file_path}")
            print("\nEdit this file to customize burstcull settings.")
            return 0
        print("Failed to create configuration file.")
        return 1

    print(f"Configuration file: {config.config_file_path}")
    if config.config_file_path.exists():
        print("Status: found")
    else:
        print("Status: not found (using defaults)")
        print("\nRun 'python -m burstcull config --init' to create one.")

    print("\nCurrent settings:")
    print(f"  similarity_threshold: {config.similarity_threshold}")
    print(f"  ssim_threshold: {config.ssim_threshold}")
    print(f"  use_ssim_refinement: {config.use_ssim_refinement}")
    print(f"  max_group_size: {config.max_group_size}")
    print(f"  default_workers: {config.default_workers}")
    print(f"  max_image_pixels: {config.max_image_pixels:,}")
    print(f"  store_db_file: {config.store_db_file}")
    return 0


def main():
    if len(sys.argv) > 1 and sys.argv[1] == 'serve':
        # Remove 'serve' from argv so the server's parser doesn't see it
        sys.argv.pop(1)
        from .app import main as serve_main
        serve_main()
    elif len(sys.argv) > 1 and sys.argv[1] == 'config':
        sys.argv.pop(1)
        sys.exit(_show_config())
    else:
        from .cli import main as cli_main
        sys.exit(cli_main())


if __name__ == '__main__':
    main()
