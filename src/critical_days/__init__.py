"""
Critical Days
-------------


This package counts critical days, days on which a daily climate variable strictly exceeds a
threshold, over the administrative regions of a country. It sources gridded observations from
the E-OBS ensemble dataset and administrative boundaries from GADM, and produces yearly regional
averages along with a choropleth map and a stacked bar chart of the results.
"""
