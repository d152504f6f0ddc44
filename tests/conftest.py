import matplotlib

matplotlib.use("Agg") # headless backend for the plotting tests
