#####storage keys#####
STORAGE_KEY = "as_colour_selected_products"
PUBLISHED_KEY = "as_colour_published_products"
MODE_KEY = "as_colour_user_mode"
CREATOR_WORKFLOW_KEY = "as_colour_creator_workflow"
GENERATED_IMAGES_KEY = "as_colour_generated_images"

ADMIN_MODE = "admin"
CREATOR_MODE = "creator"
USER_MODES = (ADMIN_MODE, CREATOR_MODE)


#####catalog#####
ITEMS_PER_PAGE = 16

ALL_GENDERS = "All"
UNISEX = "Unisex"
GENDER_OPTIONS = ("Men", "Women", "Kids | Youth", UNISEX)

WEIGHT_OPTIONS = ("Light Weight", "Mid Weight", "Heavy Weight")

# Order matters: categories are displayed in this order
PRODUCT_CATEGORIES = (
    "T-Shirts",
    "Longsleeve T-Shirts",
    "Crew Sweatshirts",
    "Zip Sweatshirts",
    "Singlets / Tanks",
    "Hooded Sweatshirts",
    "Trackpants",
    "Shorts",
    "Shirts",
    "Dresses",
    "Bags",
    "Headwear",
    "Underwear",
    "Socks",
    "Aprons",
    "Belts",
)

# Preferred order when picking a product's primary image
PRIMARY_IMAGE_TYPES = ("MAIN", "FRONT")


#####image prefetch#####
PAGE_IMAGE_BATCH_SIZE = 3
PAGE_IMAGE_FETCH_LIMIT = 15
CATEGORY_IMAGE_BATCH_SIZE = 2
CATEGORY_IMAGE_FETCH_LIMIT = 10
DELAY_BETWEEN_BATCHES = 1.0


#####api client#####
MAX_RETRIES = 3


#####image generation#####
# incoming multipart field -> upstream multipart field
GENERATE_IMAGE_FILE_FIELDS = {
    "head_image": "first_image",
    "costume_image": "second_image",
    "logo_image": "logo_image",
}
GENERATE_IMAGE_TEXT_FIELDS = ("prompt", "user_prompt", "image_type")

DEFAULT_GENERATION_MESSAGE = "Image generated and saved to My Images."

COMPOSITE_PROMPT_TEMPLATE = (
    "Transform the costume reference into a full professional photo by placing the person's head "
    "from the source image onto a complete human body wearing ONLY the costume items actually shown "
    "in the reference image - do not add or imagine any clothing not present. If the costume shows "
    "only a top/shirt, generate body with just that top; if it shows top and pants, include both; if "
    "accessories like watch or belt are visible, include them, but NEVER add items not shown in the "
    "original costume reference. If the costume is on a hanger, mannequin, or showcase display, "
    "generate a realistic human body with natural arms, hands, shoulders, and appropriate torso/legs "
    "based on what clothing is actually displayed. Extract and preserve the exact facial features, "
    "skin tone, and head shape from the source image. Match the head size proportionally to the body "
    "with natural human proportions and align the neck correctly with the collar/neckline. Position "
    "arms naturally at sides or in professional pose with both hands visible. Blend the skin tone of "
    "the face, neck, and hands perfectly with realistic human skin. Replace any hanger, mannequin, or "
    "display background with a clean plain white or light neutral professional background. Place the "
    "provided logo image on the specified position of the costume (or top-left chest area if not "
    "specified), ensuring the logo appears professionally printed/embroidered on the fabric with "
    "appropriate size that maintains logo clarity and visibility, following fabric contours naturally "
    "with proper lighting and shadows matching the garment. Match the lighting across entire body and "
    "all present garments. Ensure the displayed clothing fits naturally with realistic shadows and "
    "fabric draping. Do not invent or add any clothing items, accessories, or garments not explicitly "
    "shown in the costume reference. Generate a high-resolution result showing the person wearing "
    "EXACTLY what the costume reference displays with professional photo quality and integrated logo."
    "\n\nOriginal user prompt: {user_prompt}"
)
