"""pni -- project scaffolding for Nuxt and Vue apps with Three.js and Tailwind tokens."""

__version__ = "0.1.0"
