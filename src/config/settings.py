"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use CLASSFORWARD_ prefix (e.g., CLASSFORWARD_PROP_NAME=_cls).

Settings can also be loaded from a .env file in the project root.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use CLASSFORWARD_ prefix.

    Examples:
        CLASSFORWARD_PROP_NAME=_parentClass
        CLASSFORWARD_CLASS_PREFIX=fwd
        CLASSFORWARD_CLASS_NAMER=mypackage.naming:namer
    """

    model_config = SettingsConfigDict(
        env_prefix="CLASSFORWARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Forwarding configuration
    prop_name: str = Field(
        default="_forwardedClass",
        description="Name of the exported prop that carries a usage-site class into a component",
    )

    class_prefix: str = Field(
        default="scoped",
        description="Prefix of generated scoped class names (<prefix>-<hash>-<child>)",
    )

    class_namer: Optional[str] = Field(
        default=None,
        description="Optional 'module:function' path of a custom scoped class namer",
    )

    fallback_parent: str = Field(
        default="Component",
        description="Parent component name used when no filename is available",
    )

    # Section extraction markers (comments survive in both markup and script/style positions)
    script_marker: str = Field(
        default="/* classforward:script */",
        description="Marker that stands in for script content while markup is instrumented",
    )

    style_marker: str = Field(
        default="/* classforward:style */",
        description="Marker that stands in for style content while markup is instrumented",
    )

    # CLI configuration
    file_glob: str = Field(
        default="**/*.svelte",
        description="Glob (relative to inputdir) selecting component files to transform",
    )

    debug_mode: bool = Field(
        default=False,
        description="Enable debug output during transformation",
    )

    def scopedPrefix_make(self, content_hash: str) -> str:
        """
        Build the leading part of a default scoped class name.

        Args:
            content_hash: Base-36 hash of the style content

        Returns:
            Class prefix joined with the hash (e.g., "scoped-1x2y3z")

        Example:
            >>> settings = AppSettings()
            >>> settings.scopedPrefix_make('45h')
            'scoped-45h'
        """
        return f"{self.class_prefix}-{content_hash}"


# Singleton instance - import this in your code
appsettings = AppSettings()
