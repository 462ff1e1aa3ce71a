"""pkgexplorer command line interface."""
