# Reference lists used for zone classification.
# All entries are lowercase; pincode records are stored lowercase as well.

metro_cities = [
    "mumbai",
    "delhi",
    "new delhi",
    "bangalore",
    "bengaluru",
    "chennai",
    "kolkata",
    "hyderabad",
    "pune",
    "ahmedabad",
    "surat",
    "jaipur",
    "lucknow",
    "kanpur",
    "nagpur",
    "indore",
    "thane",
    "bhopal",
    "visakhapatnam",
    "pimpri-chinchwad",
]

north_east_states = [
    "arunachal pradesh",
    "assam",
    "manipur",
    "meghalaya",
    "mizoram",
    "nagaland",
    "sikkim",
    "tripura",
]

zone_names = {
    "Z_A": "Zone A",
    "Z_B": "Zone B",
    "Z_C": "Zone C",
    "Z_D": "Zone D",
    "Z_E": "Zone E",
}
