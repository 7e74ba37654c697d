from setuptools import setup, find_packages

# Check if PyGObject (gi) is already available system-wide
# This prevents pip from trying to build PyGObject from source when it's
# already installed via system package manager (apt, pacman, etc.)
_HAS_PYGOBJECT = False
try:
    import gi
    gi.require_version('GLib', '2.0')
    from gi.repository import GLib
    _HAS_PYGOBJECT = True
except (ImportError, ValueError, AttributeError):
    _HAS_PYGOBJECT = False

# Base requirements - always needed
install_requires = [
    "dbus-python>=1.2.0",
    "PyYAML>=6.0",
]

# PyGObject drives the GLib main loop used for signal delivery.
# If not system-installed, add it to install_requires
if not _HAS_PYGOBJECT:
    install_requires.append("PyGObject>=3.48.0")
    _pygobject_extras = {
        "glib": [],  # No-op since it's already in install_requires
    }
else:
    # PyGObject is system-installed - make it optional for pip
    _pygobject_extras = {
        "glib": ["PyGObject>=3.48.0"],
    }

setup(
    name="bluebus",
    version="0.3.0",
    description="Typed proxies over the BlueZ D-Bus object tree",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=install_requires,
    extras_require={
        **_pygobject_extras,
        "test": ["pytest>=8.0.0"],
    },
    python_requires='>=3.8',
)
