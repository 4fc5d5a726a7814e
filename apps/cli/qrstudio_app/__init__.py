"""QR Studio command line app."""
