"""Page rendering and internationalization."""
