# Read-only analytical reports over the Orders / Transportation / Carriers /
# Customers logistics dataset.
