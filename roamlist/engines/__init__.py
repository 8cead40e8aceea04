"""
Engines - domain services composed from the kernel.

- Bucket list: ranked places with a visit lifecycle
- Itinerary: ranked stops per trip and day
- Sharing: photos at visibility tiers
- Social: the follow graph
"""
