"""
Prompts pour les suggestions de titre et de description.
"""

SYSTEM_PROMPT = """You are a real-estate copywriter. You write catchy, accurate listing
titles and descriptions. Never invent features that are not listed.
Always answer in the following format:

Title: <title, maximum 100 characters>
Description: <description, 400-600 characters>
"""

SUMMARY_PROMPT = """Help me write a compelling property listing based on these details:
- Type: {property_type}
- Location: {location}
- Price: {price}
- Bedrooms: {bedrooms}
- Bathrooms: {bathrooms}
- Size: {square_feet} sq ft
- Features: {features}
{year_built}
Current title: {title}
Current description: {description}

Please provide:
1. A catchy title (maximum 100 characters)
2. A detailed description (400-600 characters) highlighting the key selling points
"""
