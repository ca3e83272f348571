"""
Enclosure Generator Configuration Module

Centralized configuration management for the enclosure generator.
Loads settings from environment variables with sensible defaults.

Usage:
    from config import config
    width = config.DEFAULT_WIDTH
    engine = config.BOOLEAN_ENGINE
"""

import math
import os
import shutil
from pathlib import Path
from typing import List

from dotenv import load_dotenv

env_path = Path(__file__).parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

VALID_BOOLEAN_ENGINES = ['manifold', 'blender']


def _env_float(name: str, default: str) -> float:
    return float(os.getenv(name, default))


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('true', '1', 'yes')


class Config:
    """
    Configuration class for the enclosure generator.

    Attributes are loaded from environment variables with fallback defaults.
    """

    # =============================================================================
    # Enclosure Defaults
    # =============================================================================

    @property
    def DEFAULT_WIDTH(self) -> float:
        """Default enclosure width (X)"""
        return _env_float('DEFAULT_WIDTH', '25')

    @property
    def DEFAULT_LENGTH(self) -> float:
        """Default enclosure length (Z)"""
        return _env_float('DEFAULT_LENGTH', '10')

    @property
    def DEFAULT_HEIGHT(self) -> float:
        """Default wall height (Y)"""
        return _env_float('DEFAULT_HEIGHT', '5')

    @property
    def DEFAULT_THICKNESS(self) -> float:
        """Default wall thickness"""
        return _env_float('DEFAULT_THICKNESS', '0.5')

    # =============================================================================
    # Cone Tiling
    # =============================================================================

    @property
    def CONE_RADIUS(self) -> float:
        return _env_float('CONE_RADIUS', '0.125')

    @property
    def CONE_HEIGHT(self) -> float:
        return _env_float('CONE_HEIGHT', '0.25')

    @property
    def CONE_SEGMENTS(self) -> int:
        """Radial segments per cone (4 gives square pyramids)"""
        return int(os.getenv('CONE_SEGMENTS', '4'))

    @property
    def CONES_ENABLED(self) -> bool:
        return _env_bool('CONES_ENABLED', 'True')

    # =============================================================================
    # Boolean Backend
    # =============================================================================

    @property
    def BOOLEAN_ENGINE(self) -> str:
        """trimesh boolean engine for the door cut (manifold, blender)"""
        engine = os.getenv('BOOLEAN_ENGINE', 'manifold').lower()
        if engine not in VALID_BOOLEAN_ENGINES:
            return 'manifold'
        return engine

    # =============================================================================
    # Assets
    # =============================================================================

    @property
    def PROJECT_ROOT(self) -> Path:
        """Project root directory"""
        return Path(__file__).parent

    @property
    def ASSET_DIR(self) -> Path:
        asset_dir = Path(os.getenv('ASSET_DIR', 'assets'))
        if not asset_dir.is_absolute():
            asset_dir = self.PROJECT_ROOT / asset_dir
        return asset_dir

    @property
    def FLOOR_TEXTURE(self) -> Path:
        """Checkerboard image repeated over the floor plane"""
        return self.ASSET_DIR / os.getenv('FLOOR_TEXTURE', 'checkerboard.png')

    @property
    def CUBEMAP_DIR(self) -> Path:
        return self.ASSET_DIR / os.getenv('CUBEMAP_DIR', 'cubemap')

    @property
    def CUBEMAP_FACES(self) -> List[str]:
        """Six face files in +X, -X, +Y, -Y, +Z, -Z order"""
        default = 'px.jpg,checkerboard.png,checkerboard.png,checkerboard.png,checkerboard.png,checkerboard.png'
        return [name.strip() for name in os.getenv('CUBEMAP_FACES', default).split(',') if name.strip()]

    @property
    def MODEL_PATH(self) -> Path:
        """Model attached at the roof corner anchor"""
        return self.ASSET_DIR / os.getenv('MODEL_PATH', 'glbFile/spot.glb')

    @property
    def MODEL_SCALE(self) -> float:
        return _env_float('MODEL_SCALE', '1.0')

    @property
    def LABEL_TEXT(self) -> str:
        """Text shown above the door (empty disables the label)"""
        return os.getenv('LABEL_TEXT', 'SIEPEL')

    # =============================================================================
    # File Paths
    # =============================================================================

    @property
    def EXPORT_DIR(self) -> Path:
        """Default directory for GLB exports"""
        export_dir = Path(os.getenv('EXPORT_DIR', 'exports'))
        if not export_dir.is_absolute():
            export_dir = self.PROJECT_ROOT / export_dir
        export_dir.mkdir(parents=True, exist_ok=True)
        return export_dir

    @property
    def SAVE_DIR(self) -> Path:
        """Default directory for JSON scene saves"""
        save_dir = Path(os.getenv('SAVE_DIR', 'saves'))
        if not save_dir.is_absolute():
            save_dir = self.PROJECT_ROOT / save_dir
        save_dir.mkdir(parents=True, exist_ok=True)
        return save_dir

    # =============================================================================
    # Performance Settings
    # =============================================================================

    @property
    def MAX_CONES_WARNING(self) -> int:
        """Warn user if cone count exceeds this threshold"""
        return int(os.getenv('MAX_CONES_WARNING', '50000'))

    # =============================================================================
    # Debug/Development
    # =============================================================================

    @property
    def DEBUG(self) -> bool:
        """Enable debug mode"""
        return _env_bool('DEBUG', 'False')

    @property
    def VERBOSE(self) -> bool:
        """Enable verbose output during generation"""
        return _env_bool('VERBOSE', 'False')

    # =============================================================================
    # Helper Methods
    # =============================================================================

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of warnings/errors.

        Returns:
            List of warning/error messages (empty if all OK)
        """
        issues = []

        dims = [self.DEFAULT_WIDTH, self.DEFAULT_LENGTH, self.DEFAULT_HEIGHT, self.DEFAULT_THICKNESS]
        if any(not math.isfinite(v) or v <= 0 for v in dims):
            issues.append("Default dimensions must be finite positive numbers")

        if self.CONE_RADIUS <= 0 or self.CONE_HEIGHT <= 0:
            issues.append("Cone radius and height must be positive")
        if self.CONE_SEGMENTS < 3:
            issues.append("Cone segments must be at least 3")

        if self.BOOLEAN_ENGINE == 'blender':
            if shutil.which("blender") is None:
                issues.append("BOOLEAN_ENGINE=blender but no blender executable is on PATH")

        if len(self.CUBEMAP_FACES) != 6:
            issues.append(f"CUBEMAP_FACES must list 6 files, got {len(self.CUBEMAP_FACES)}")

        if not self.ASSET_DIR.exists():
            issues.append(f"Asset directory does not exist: {self.ASSET_DIR} (textures/models will be skipped)")

        return issues

    def get_summary(self) -> str:
        """
        Get human-readable configuration summary.

        Returns:
            Formatted configuration summary string
        """
        lines = [
            "Enclosure Generator Configuration:",
            f"  Project Root: {self.PROJECT_ROOT}",
            f"  Asset Dir: {self.ASSET_DIR}",
            f"  Export Dir: {self.EXPORT_DIR}",
            f"  Save Dir: {self.SAVE_DIR}",
            "",
            "Defaults:",
            f"  Dimensions: {self.DEFAULT_WIDTH}x{self.DEFAULT_LENGTH}x{self.DEFAULT_HEIGHT}"
            f" (thickness {self.DEFAULT_THICKNESS})",
            f"  Cones: r={self.CONE_RADIUS} h={self.CONE_HEIGHT} segments={self.CONE_SEGMENTS}"
            f" {'on' if self.CONES_ENABLED else 'off'}",
            "",
            "Boolean Backend:",
            f"  Engine: {self.BOOLEAN_ENGINE}",
            "",
            "Performance:",
            f"  Max cones warning: {self.MAX_CONES_WARNING}",
            "",
            "Debug:",
            f"  Debug mode: {self.DEBUG}",
            f"  Verbose: {self.VERBOSE}",
        ]
        return "\n".join(lines)


# Global config instance
config = Config()


def check_config():
    """
    Check configuration and print warnings.
    Call this at application startup.
    """
    issues = config.validate()
    if issues:
        print("⚠️  Configuration Warnings:")
        for issue in issues:
            print(f"   - {issue}")
        print()


if __name__ == "__main__":
    # Allow running as script to check configuration
    print(config.get_summary())
    print()

    issues = config.validate()
    if issues:
        print("⚠️  Issues found:")
        for issue in issues:
            print(f"   - {issue}")
    else:
        print("✅ Configuration valid!")
